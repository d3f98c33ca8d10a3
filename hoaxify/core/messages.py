"""
Message catalog used by the HTTP layer.

Services only choose a key; this module renders it for the requested locale.
English and Hindi are bundled; other locales fall back to English.
"""

from __future__ import annotations

from typing import Optional

DEFAULT_LOCALE = "en"

_CATALOGS: dict[str, dict[str, str]] = {
    "en": {
        "authentication_failure": "Incorrect credentials",
        "inactive_authentication_failure": "Account is inactive",
        "unauthorized_user_update": "You are not authorized to update user",
        "validation_failure": "Validation Failure",
        "internal_error": "Unexpected error",
        "user_create_success": "User created",
        "username_null": "Username cannot be null",
        "username_size": "Must have min 4 and max 32 characters",
        "username_inuse": "Username in use",
        "email_null": "E-mail cannot be null",
        "email_invalid": "E-mail is not valid",
        "email_inuse": "E-mail in use",
        "email_immutable": "E-mail cannot be changed",
        "password_null": "Password cannot be null",
        "password_size": "Password must be at least 6 characters",
        "password_pattern": "Password must have at least 1 uppercase, 1 lowercase letter and 1 number",
        "profile_image_size": "Your profile image cannot be bigger than 2MB",
        "unsupported_image_file": "Only JPEG or PNG files are allowed",
        "invalid_body": "Request body must be a JSON object",
    },
    "hi": {
        "authentication_failure": "गलत क्रेडेंशियल",
        "inactive_authentication_failure": "खाता निष्क्रिय है",
        "unauthorized_user_update": "आप उपयोगकर्ता को अपडेट करने के लिए अधिकृत नहीं हैं",
        "validation_failure": "सत्यापन विफल",
        "internal_error": "अप्रत्याशित त्रुटि",
        "user_create_success": "उपयोगकर्ता बनाया गया",
        "username_null": "उपयोगकर्ता नाम खाली नहीं हो सकता",
        "username_size": "कम से कम 4 और अधिकतम 32 अक्षर होने चाहिए",
        "username_inuse": "उपयोगकर्ता नाम पहले से उपयोग में है",
        "email_null": "ई-मेल खाली नहीं हो सकता",
        "email_invalid": "ई-मेल मान्य नहीं है",
        "email_inuse": "ई-मेल पहले से उपयोग में है",
        "email_immutable": "ई-मेल बदला नहीं जा सकता",
        "password_null": "पासवर्ड खाली नहीं हो सकता",
        "password_size": "पासवर्ड कम से कम 6 अक्षरों का होना चाहिए",
        "password_pattern": "पासवर्ड में कम से कम 1 बड़ा अक्षर, 1 छोटा अक्षर और 1 अंक होना चाहिए",
        "profile_image_size": "आपकी प्रोफ़ाइल छवि 2MB से बड़ी नहीं हो सकती",
        "unsupported_image_file": "केवल JPEG या PNG फ़ाइलें स्वीकार्य हैं",
        "invalid_body": "अनुरोध का मुख्य भाग JSON ऑब्जेक्ट होना चाहिए",
    },
}


def locale_from_header(accept_language: Optional[str]) -> str:
    """Pick the first language tag of an Accept-Language header ("hi-IN,hi;q=0.9" -> "hi")."""
    if not accept_language:
        return DEFAULT_LOCALE
    first = accept_language.split(",")[0].split(";")[0].strip().lower()
    return first.split("-")[0] or DEFAULT_LOCALE


def translate(key: str, locale: Optional[str] = None) -> str:
    catalog = _CATALOGS.get((locale or DEFAULT_LOCALE).lower()) or _CATALOGS[DEFAULT_LOCALE]
    if key in catalog:
        return catalog[key]
    return _CATALOGS[DEFAULT_LOCALE].get(key, key)
