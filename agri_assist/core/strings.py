"""
Localized strings used by the orchestrator and views.

Only the strings that flow into model instructions or user-visible errors live
here. Lookups fall back to en-US when a key is missing for a language.
"""

from typing import Dict

from .types import Language

STRINGS: Dict[Language, Dict[str, str]] = {
    Language.EN_US: {
        "diagnoser_prompt": (
            "You are an expert plant pathologist. Diagnose the plant disease from the description and/or image. "
            "List organic treatments, chemical treatments and prevention tips."
        ),
        "identifier_prompt": "You are an expert botanist. Identify the plant in the image and give practical care tips.",
        "expert_chat_system_prompt": (
            "You are AgriBot, a friendly and knowledgeable agricultural expert. Give farmers practical, safe and "
            "concise advice about crops, soil, pests, irrigation and farm management. Answer in English."
        ),
        "expert_chat_welcome": "Hello! I'm AgriBot, your farming expert. How can I help you today?",
        "error_chat": "Sorry, I couldn't get a response. Please try again.",
        "error_file_size": "File is too large. Please upload an image smaller than 4MB.",
        "error_prompt_or_image": "Please describe the symptoms or upload an image.",
        "error_image_required": "Please upload an image of the plant.",
        "error_crop_name": "Please enter a crop name.",
        "market_price_error": "Could not read market prices from the response. Please try again.",
        "community_question_error": "Please enter a question.",
        "error_invalid_response": "The model returned an invalid response.",
        "error_unknown": "An unknown error occurred.",
        "speech_unsupported": "Speech recognition is not available.",
    },
    Language.ES_ES: {
        "diagnoser_prompt": (
            "Eres un fitopatólogo experto. Diagnostica la enfermedad de la planta a partir de la descripción y/o la imagen. "
            "Enumera tratamientos orgánicos, tratamientos químicos y consejos de prevención."
        ),
        "identifier_prompt": "Eres un botánico experto. Identifica la planta de la imagen y da consejos prácticos de cuidado.",
        "expert_chat_system_prompt": (
            "Eres AgriBot, un experto agrícola amable y bien informado. Da a los agricultores consejos prácticos, seguros y "
            "concisos sobre cultivos, suelo, plagas, riego y gestión de la finca. Responde en español."
        ),
        "expert_chat_welcome": "¡Hola! Soy AgriBot, tu experto agrícola. ¿En qué puedo ayudarte hoy?",
        "error_chat": "Lo siento, no pude obtener una respuesta. Inténtalo de nuevo.",
        "error_file_size": "El archivo es demasiado grande. Sube una imagen de menos de 4MB.",
        "error_prompt_or_image": "Describe los síntomas o sube una imagen.",
        "error_image_required": "Sube una imagen de la planta.",
        "error_crop_name": "Introduce el nombre de un cultivo.",
        "community_question_error": "Escribe una pregunta.",
        "error_unknown": "Se produjo un error desconocido.",
    },
    Language.HI_IN: {
        "diagnoser_prompt": (
            "आप एक विशेषज्ञ पादप रोग वैज्ञानिक हैं। विवरण और/या चित्र से पौधे के रोग का निदान करें। "
            "जैविक उपचार, रासायनिक उपचार और रोकथाम के सुझाव बताएं।"
        ),
        "identifier_prompt": "आप एक विशेषज्ञ वनस्पतिशास्त्री हैं। चित्र में पौधे की पहचान करें और देखभाल के व्यावहारिक सुझाव दें।",
        "expert_chat_system_prompt": (
            "आप एग्रीबॉट हैं, एक मित्रवत और जानकार कृषि विशेषज्ञ। किसानों को फसल, मिट्टी, कीट, सिंचाई और खेत प्रबंधन के बारे में "
            "व्यावहारिक, सुरक्षित और संक्षिप्त सलाह दें। हिंदी में उत्तर दें।"
        ),
        "expert_chat_welcome": "नमस्ते! मैं एग्रीबॉट हूँ, आपका कृषि विशेषज्ञ। आज मैं आपकी क्या मदद कर सकता हूँ?",
        "error_chat": "क्षमा करें, उत्तर नहीं मिल सका। कृपया फिर से प्रयास करें।",
        "error_file_size": "फ़ाइल बहुत बड़ी है। कृपया 4MB से छोटी छवि अपलोड करें।",
        "error_prompt_or_image": "कृपया लक्षणों का वर्णन करें या एक छवि अपलोड करें।",
        "error_image_required": "कृपया पौधे की एक छवि अपलोड करें।",
        "error_crop_name": "कृपया फसल का नाम दर्ज करें।",
        "community_question_error": "कृपया एक प्रश्न दर्ज करें।",
        "error_unknown": "एक अज्ञात त्रुटि हुई।",
    },
    Language.KN_IN: {
        "diagnoser_prompt": (
            "ನೀವು ಪರಿಣಿತ ಸಸ್ಯ ರೋಗಶಾಸ್ತ್ರಜ್ಞರು. ವಿವರಣೆ ಮತ್ತು/ಅಥವಾ ಚಿತ್ರದಿಂದ ಸಸ್ಯದ ರೋಗವನ್ನು ಗುರುತಿಸಿ. "
            "ಸಾವಯವ ಚಿಕಿತ್ಸೆಗಳು, ರಾಸಾಯನಿಕ ಚಿಕಿತ್ಸೆಗಳು ಮತ್ತು ತಡೆಗಟ್ಟುವ ಸಲಹೆಗಳನ್ನು ಪಟ್ಟಿ ಮಾಡಿ."
        ),
        "identifier_prompt": "ನೀವು ಪರಿಣಿತ ಸಸ್ಯಶಾಸ್ತ್ರಜ್ಞರು. ಚಿತ್ರದಲ್ಲಿರುವ ಸಸ್ಯವನ್ನು ಗುರುತಿಸಿ ಮತ್ತು ಆರೈಕೆಯ ಸಲಹೆಗಳನ್ನು ನೀಡಿ.",
        "expert_chat_system_prompt": (
            "ನೀವು ಅಗ್ರಿಬಾಟ್, ಸ್ನೇಹಪರ ಮತ್ತು ಜ್ಞಾನವುಳ್ಳ ಕೃಷಿ ತಜ್ಞರು. ಬೆಳೆ, ಮಣ್ಣು, ಕೀಟಗಳು, ನೀರಾವರಿ ಮತ್ತು ಕೃಷಿ ನಿರ್ವಹಣೆಯ ಬಗ್ಗೆ "
            "ರೈತರಿಗೆ ಪ್ರಾಯೋಗಿಕ ಮತ್ತು ಸಂಕ್ಷಿಪ್ತ ಸಲಹೆ ನೀಡಿ. ಕನ್ನಡದಲ್ಲಿ ಉತ್ತರಿಸಿ."
        ),
        "expert_chat_welcome": "ನಮಸ್ಕಾರ! ನಾನು ಅಗ್ರಿಬಾಟ್, ನಿಮ್ಮ ಕೃಷಿ ತಜ್ಞ. ಇಂದು ನಾನು ನಿಮಗೆ ಹೇಗೆ ಸಹಾಯ ಮಾಡಲಿ?",
        "error_chat": "ಕ್ಷಮಿಸಿ, ಉತ್ತರ ಪಡೆಯಲು ಸಾಧ್ಯವಾಗಲಿಲ್ಲ. ದಯವಿಟ್ಟು ಮತ್ತೆ ಪ್ರಯತ್ನಿಸಿ.",
        "error_file_size": "ಫೈಲ್ ತುಂಬಾ ದೊಡ್ಡದಾಗಿದೆ. ದಯವಿಟ್ಟು 4MB ಗಿಂತ ಚಿಕ್ಕ ಚಿತ್ರವನ್ನು ಅಪ್‌ಲೋಡ್ ಮಾಡಿ.",
        "error_crop_name": "ದಯವಿಟ್ಟು ಬೆಳೆಯ ಹೆಸರನ್ನು ನಮೂದಿಸಿ.",
        "community_question_error": "ದಯವಿಟ್ಟು ಒಂದು ಪ್ರಶ್ನೆಯನ್ನು ನಮೂದಿಸಿ.",
    },
}


def t(language: Language, key: str) -> str:
    """Look up a string for a language, falling back to en-US."""
    value = STRINGS.get(language, {}).get(key)
    if value:
        return value
    return STRINGS[Language.EN_US][key]
