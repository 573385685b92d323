"""
Seed default app settings: feature flags, texts, themes, navigation, config.
Rows that already exist (same key) are left alone, so the script can be
re-run safely.
Run with: python -m scripts.seed_settings
"""

import asyncio

from sqlalchemy import select

import scripts._common  # noqa: F401
from db.session import Database
from models.settings import AppConfig, AppText, FeatureFlag, NavigationTab, ThemeSetting
from scripts._common import open_database

FEATURE_FLAGS = [
    ("enable_voting", "Abstimmungen", "Aktiviert das Abstimmungs-Feature", True, "features"),
    ("enable_donations", "Spenden", "Aktiviert das Spenden-Feature", True, "features"),
    ("enable_leaderboard", "Leaderboard", "Zeigt Rangliste der aktivsten User", True, "features"),
    ("enable_achievements", "Erfolge", "Aktiviert Erfolge und Badges", False, "features"),
    ("enable_dark_mode", "Dark Mode", "Ermöglicht dunkles Theme", True, "ui"),
    ("enable_notifications", "Push Benachrichtigungen", "Erlaubt Push Notifications", True, "notifications"),
    ("enable_social_share", "Social Sharing", "Teilen-Funktion für Projekte", True, "social"),
    ("maintenance_mode", "Wartungsmodus", "App in Wartung", False, "system"),
]

APP_TEXTS = {
    "de": [
        ("welcome_title", "Willkommen bei One World", "general"),
        ("welcome_subtitle", "Gemeinsam Gutes tun", "general"),
        ("app_slogan", "Mit deiner Hilfe setzen wir humanitäre Projekte weltweit um", "general"),
        ("btn_vote", "Abstimmen", "buttons"),
        ("btn_donate", "Jetzt spenden", "buttons"),
        ("btn_login", "Anmelden", "buttons"),
        ("btn_register", "Registrieren", "buttons"),
        ("btn_cancel", "Abbrechen", "buttons"),
        ("btn_save", "Speichern", "buttons"),
        ("nav_home", "Startseite", "navigation"),
        ("nav_voting", "Abstimmung", "navigation"),
        ("nav_projects", "Projekte", "navigation"),
        ("nav_donate", "Spenden", "navigation"),
        ("nav_profile", "Profil", "navigation"),
        ("voting_title", "Projekt-Abstimmung", "voting"),
        ("voting_subtitle", "Welches Projekt soll als nächstes starten?", "voting"),
        ("voting_success", "Deine Stimme wurde gezählt!", "voting"),
        ("voting_already_voted", "Du hast bereits abgestimmt", "voting"),
        ("voting_closed", "Abstimmung beendet", "voting"),
        ("voting_no_active", "Keine aktive Abstimmung", "voting"),
        ("msg_loading", "Lädt...", "messages"),
        ("msg_error", "Ein Fehler ist aufgetreten", "messages"),
        ("msg_network_error", "Keine Internetverbindung", "messages"),
        ("empty_voting", "Aktuell läuft keine Projekt-Abstimmung", "empty"),
    ],
    "en": [
        ("welcome_title", "Welcome to One World", "general"),
        ("welcome_subtitle", "Making a difference together", "general"),
        ("btn_vote", "Vote", "buttons"),
        ("btn_donate", "Donate now", "buttons"),
        ("voting_title", "Project Voting", "voting"),
        ("voting_subtitle", "Which project should start next?", "voting"),
        ("voting_success", "Your vote has been counted!", "voting"),
    ],
}

THEMES = [
    {"name": "default", "is_active": True},
    {
        "name": "christmas",
        "is_active": False,
        "primary_color": "#C41E3A",
        "secondary_color": "#165B33",
        "accent_color": "#FFD700",
        "background_color": "#F5F5F5",
        "text_color": "#2C3E50",
        "button_color": "#C41E3A",
    },
]

NAVIGATION_TABS = [
    ("home", "Startseite", "home", "/", 1, False),
    ("voting", "Abstimmung", "ballot", "/voting", 2, False),
    ("projects", "Projekte", "folder", "/projects", 3, False),
    ("donate", "Spenden", "favorite", "/donate", 4, False),
    ("profile", "Profil", "person", "/profile", 5, True),
]

APP_CONFIG = [
    (
        "app_info",
        {"name": "One World", "version": "1.0.0", "support_email": "support@oneworld.org"},
        "general",
        "App Informationen",
        True,
    ),
    (
        "donation_amounts",
        {"preset_amounts": [5, 10, 25, 50, 100], "currency": "EUR", "min_amount": 1, "max_amount": 10000},
        "donations",
        "Vordefinierte Spendenbeträge",
        True,
    ),
    (
        "voting_rules",
        {"votes_per_user": 1, "min_options": 2, "max_options": 5, "vote_period_days": 30},
        "voting",
        "Abstimmungs-Regeln",
        True,
    ),
    (
        "legal_urls",
        {
            "privacy_policy": "https://oneworld.org/privacy",
            "terms_of_service": "https://oneworld.org/terms",
            "imprint": "https://oneworld.org/imprint",
        },
        "legal",
        "Rechtliche URLs",
        True,
    ),
]


async def seed_settings(database: Database) -> int:
    """Insert missing default rows. Returns the number of rows created."""
    created = 0

    async with database.transaction() as session:
        existing_flags = set((await session.execute(select(FeatureFlag.key))).scalars())
        for key, name, description, enabled, category in FEATURE_FLAGS:
            if key not in existing_flags:
                session.add(
                    FeatureFlag(key=key, name=name, description=description, enabled=enabled, category=category)
                )
                created += 1

        existing_texts = {
            (key, language) for key, language in (await session.execute(select(AppText.key, AppText.language))).all()
        }
        for language, texts in APP_TEXTS.items():
            for key, value, category in texts:
                if (key, language) not in existing_texts:
                    session.add(AppText(key=key, language=language, value=value, category=category))
                    created += 1

        existing_themes = set((await session.execute(select(ThemeSetting.name))).scalars())
        for theme in THEMES:
            if theme["name"] not in existing_themes:
                session.add(ThemeSetting(**theme))
                created += 1

        existing_tabs = set((await session.execute(select(NavigationTab.key))).scalars())
        for key, title, icon, route, display_order, requires_auth in NAVIGATION_TABS:
            if key not in existing_tabs:
                session.add(
                    NavigationTab(
                        key=key,
                        title=title,
                        icon=icon,
                        route=route,
                        display_order=display_order,
                        enabled=True,
                        requires_auth=requires_auth,
                    )
                )
                created += 1

        existing_config = set((await session.execute(select(AppConfig.key))).scalars())
        for key, value, category, description, is_public in APP_CONFIG:
            if key not in existing_config:
                session.add(
                    AppConfig(key=key, value=value, category=category, description=description, is_public=is_public)
                )
                created += 1

    return created


async def main() -> None:
    database = open_database()
    try:
        created = await seed_settings(database)
        print(f"✅ Seeded {created} settings rows")
    finally:
        await database.close()


if __name__ == "__main__":
    asyncio.run(main())
