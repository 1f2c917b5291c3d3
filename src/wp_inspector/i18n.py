"""
Internationalization (i18n) module for the WordPress inspector.

Provides German (de) and English (en) texts for every user-facing message,
including the failure message the caller shows verbatim for a failed
connection attempt.
"""

from typing import Optional


SUPPORTED_LANGUAGES = frozenset({"de", "en"})
DEFAULT_LANGUAGE = "en"


# Structure: {message_key: {language_code: translated_message}}
TRANSLATIONS: dict[str, dict[str, str]] = {
    # Failure kinds
    "error.not_wordpress": {
        "de": "Diese Website scheint keine WordPress-Seite zu sein.",
        "en": "This does not appear to be a WordPress site.",
    },
    "error.site_unreachable": {
        "de": "Website nicht gefunden oder nicht erreichbar. Bitte URL prüfen.",
        "en": "Website not found or not accessible. Please check the URL.",
    },
    "error.timeout": {
        "de": "Zeitüberschreitung. Die Website ist langsam oder nicht erreichbar.",
        "en": "Connection timeout. The website may be slow or unreachable.",
    },
    "error.authentication_failed": {
        "de": "Authentifizierung fehlgeschlagen. Bitte Benutzername und Zugangsdaten prüfen.",
        "en": "Authentication failed. Please check your username and credentials.",
    },
    "error.authentication_failed_credentials": {
        "de": "Authentifizierung fehlgeschlagen, die REST-API ist aber erreichbar. Bitte prüfen: "
              "1. Benutzername 2. Anwendungspasswort aktiv 3. Berechtigungen des Benutzers",
        "en": "Authentication failed while the REST API is reachable. Please verify: "
              "1. Username is correct 2. Application password is valid and active "
              "3. User has sufficient permissions",
    },
    "error.authentication_failed_invalid_login": {
        "de": "Ungültiger Benutzername oder Anwendungspasswort.",
        "en": "Invalid username or application password. Please check your credentials.",
    },
    "error.insufficient_permissions": {
        "de": "Zugriff verweigert. Das Benutzerkonto hat nicht die nötigen Berechtigungen.",
        "en": "Access forbidden. The user account may be disabled or lack sufficient permissions.",
    },
    "error.api_unavailable": {
        "de": "WordPress-REST-API nicht gefunden. Die API ist eventuell deaktiviert oder blockiert.",
        "en": "WordPress REST API endpoint not found. The API may be disabled or blocked.",
    },
    "error.remote_server_error": {
        "de": "Serverfehler der WordPress-Seite. Bitte später erneut versuchen.",
        "en": "WordPress site server error. Please try again later.",
    },
    "error.invalid_credentials": {
        "de": "Für die Methode '{method}' fehlen Zugangsdaten: {missing}",
        "en": "Missing credentials for method '{method}': {missing}",
    },
    "error.invalid_credentials_encoding": {
        "de": "Zugangsdaten für die Methode '{method}' enthalten Zeichen, die in HTTP-Headern nicht erlaubt sind: {invalid}",
        "en": "Credentials for method '{method}' contain characters not allowed in HTTP headers: {invalid}",
    },
    "error.unsupported_method": {
        "de": "Nicht unterstützte Authentifizierungsmethode: {method}",
        "en": "Unsupported authentication method: {method}",
    },

    # Probe
    "probe.rest_api": {
        "de": "WordPress-REST-API erreichbar (HTTP {status}).",
        "en": "WordPress REST API reachable (HTTP {status}).",
    },
    "probe.html_fingerprint": {
        "de": "WordPress erkannt, die REST-API ist aber eventuell deaktiviert.",
        "en": "WordPress detected but REST API may be disabled.",
    },

    # Connection
    "connection.success": {
        "de": "Verbindung zu {site} erfolgreich (WordPress {version}).",
        "en": "Connected to {site} (WordPress {version}).",
    },

    # CLI
    "cli.probing": {
        "de": "Prüfe {url} ...",
        "en": "Probing {url} ...",
    },
    "cli.connecting": {
        "de": "Verbinde mit {url} über {method} ...",
        "en": "Connecting to {url} using {method} ...",
    },
    "cli.is_wordpress": {
        "de": "WordPress: {value}",
        "en": "WordPress: {value}",
    },
    "cli.failed": {
        "de": "Fehlgeschlagen: {message}",
        "en": "Failed: {message}",
    },
    "cli.inventory": {
        "de": "Plugins: {plugins}, Themes: {themes}, Beiträge: {posts} (Quelle: {source})",
        "en": "Plugins: {plugins}, Themes: {themes}, Posts: {posts} (source: {source})",
    },
    "cli.yes": {
        "de": "ja",
        "en": "yes",
    },
    "cli.no": {
        "de": "nein",
        "en": "no",
    },
}


def get_message(
    key: str,
    language: Optional[str] = None,
    **kwargs,
) -> str:
    """
    Get a translated message by key.

    Args:
        key: The message key (e.g., 'error.timeout')
        language: Language code ('de' or 'en'). Defaults to DEFAULT_LANGUAGE.
        **kwargs: Format arguments for the message template

    Returns:
        The translated and formatted message string.
        If the key is not found, returns the key itself.

    Examples:
        >>> get_message('cli.yes', 'de')
        'ja'
        >>> get_message('error.unsupported_method', 'en', method='ldap')
        'Unsupported authentication method: ldap'
    """
    if language is None or language not in SUPPORTED_LANGUAGES:
        language = DEFAULT_LANGUAGE

    translations = TRANSLATIONS.get(key)
    if translations is None:
        return key

    message = translations.get(language) or translations.get(DEFAULT_LANGUAGE)
    if message is None:
        return key

    if kwargs:
        try:
            message = message.format(**kwargs)
        except KeyError:
            pass

    return message


def get_all_message_keys() -> set[str]:
    """Get all available message keys."""
    return set(TRANSLATIONS.keys())


def get_missing_translations(language: str) -> set[str]:
    """
    Get all message keys that are missing translations for a language.

    Args:
        language: The language code to check

    Returns:
        Set of message keys missing translations for the specified language.
    """
    return {
        key for key, translations in TRANSLATIONS.items()
        if language not in translations
    }


def validate_translations() -> dict[str, set[str]]:
    """
    Validate that all languages have all translations.

    Returns:
        Dictionary mapping language codes to sets of missing message keys.
        Empty sets indicate complete translations.
    """
    return {
        language: get_missing_translations(language)
        for language in SUPPORTED_LANGUAGES
    }
