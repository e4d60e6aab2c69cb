"""
Answers served when the completion model is unavailable.

Two explicit tables: curated topic answers keyed by keyword and language, and
user-facing error messages keyed by failure class and language.
"""

from typing import Dict, Optional

from .chat_service import AUTHENTICATION, RATE_LIMIT, UNAVAILABLE

# keyword (lower case) -> language -> answer
CANNED_ANSWERS: Dict[str, Dict[str, str]] = {
    "swaminarayan": {
        "gu": (
            "Swaminarayan Bhagwan no janma 3 April 1781 ma Chhapaiya gaame thayo hato. "
            "Temnun asli naam Ghanshyam Pande hatu."
        ),
        "en": (
            "Swaminarayan Bhagwan was born on 3 April 1781 in the village of Chhapaiya. "
            "His birth name was Ghanshyam Pande."
        ),
        "hi": (
            "स्वामीनारायण भगवान का जन्म 3 अप्रैल 1781 को छपैया गाँव में हुआ था। "
            "उनका मूल नाम घनश्याम पांडे था।"
        ),
    },
    "chhapaiya": {
        "gu": (
            "Chhapaiya ek nanu gaamu che je Uttar Pradesh, Bharat ma aavelu che. "
            "Ahin Swaminarayan Bhagwan no janma thayo hato."
        ),
        "en": (
            "Chhapaiya is a small village in Uttar Pradesh, India. "
            "Swaminarayan Bhagwan was born there."
        ),
        "hi": (
            "छपैया उत्तर प्रदेश, भारत का एक छोटा गाँव है। "
            "यहीं स्वामीनारायण भगवान का जन्म हुआ था।"
        ),
    },
}

# failure class -> language -> message
ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    AUTHENTICATION: {
        "en": (
            "The answering service is not configured correctly (missing or invalid API key). "
            "Please contact the administrator."
        ),
        "hi": "उत्तर सेवा सही तरीके से कॉन्फ़िगर नहीं है (API कुंजी गायब या अमान्य)। कृपया व्यवस्थापक से संपर्क करें।",
        "fr": (
            "Le service de réponse n'est pas correctement configuré (clé API manquante ou invalide). "
            "Veuillez contacter l'administrateur."
        ),
        "es": (
            "El servicio de respuestas no está configurado correctamente (clave de API ausente o inválida). "
            "Póngase en contacto con el administrador."
        ),
    },
    RATE_LIMIT: {
        "en": "The answering service is receiving too many requests right now. Please wait a moment and try again.",
        "hi": "उत्तर सेवा पर अभी बहुत अधिक अनुरोध हैं। कृपया थोड़ी देर बाद पुनः प्रयास करें।",
        "fr": "Le service de réponse reçoit trop de demandes. Veuillez patienter un instant puis réessayer.",
        "es": "El servicio de respuestas está recibiendo demasiadas solicitudes. Espere un momento e inténtelo de nuevo.",
    },
    UNAVAILABLE: {
        "en": "I encountered an error while generating an answer. Please try again.",
        "hi": "उत्तर तैयार करते समय एक त्रुटि हुई। कृपया पुनः प्रयास करें।",
        "fr": "J'ai rencontré une erreur en générant la réponse. Veuillez réessayer.",
        "es": "Se produjo un error al generar la respuesta. Inténtelo de nuevo.",
    },
}

DEFAULT_MESSAGE_LANGUAGE = "en"


def find_canned_answer(question_text: str, language: str) -> Optional[str]:
    """First curated answer whose keyword occurs in the question, in ``language``."""
    lowered = question_text.lower()
    for keyword, answers in CANNED_ANSWERS.items():
        if keyword in lowered and language in answers:
            return answers[language]
    return None


def error_message(reason: str, language: str) -> str:
    """Message for a failure class in ``language``, English when no translation exists."""
    messages = ERROR_MESSAGES.get(reason, ERROR_MESSAGES[UNAVAILABLE])
    return messages.get(language, messages[DEFAULT_MESSAGE_LANGUAGE])
