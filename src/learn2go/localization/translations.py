"""Static UI string tables."""

from learn2go.localization.countries import DEFAULT_LANGUAGE

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        "nav.home": "Home",
        "nav.dashboard": "Dashboard",
        "nav.lessons": "Lessons",
        "nav.results": "Results",
        "nav.logout": "Logout",
        "nav.login": "Login",
        "home.title": "Welcome to Learn2Go",
        "home.subtitle": "Master Traffic Rules & Road Safety",
        "auth.login": "Login",
        "auth.signup": "Join Learn2Go",
        "auth.username": "Username",
        "auth.enterUsername": "Enter your username",
        "dashboard.welcome": "Welcome back",
        "dashboard.progress": "Your Safety Progress",
        "dashboard.currentLevel": "Current Level",
        "dashboard.completedLessons": "Lessons Completed",
        "dashboard.badges": "Safety Badges",
        "lessons.title": "Traffic Safety Lessons",
        "lessons.level": "Level",
        "lessons.completed": "Completed",
        "lessons.quiz": "Take Safety Quiz",
        "quiz.title": "Safety Quiz",
        "quiz.score": "Your Safety Score",
        "quiz.passed": "Excellent! You passed the safety test!",
        "quiz.failed": "Review the lesson and try again to improve your safety knowledge",
        "common.loading": "Loading...",
        "common.error": "Error",
        "common.success": "Success",
    },
    "te": {
        "nav.home": "ముంగిలి",
        "nav.dashboard": "డాష్‌బోర్డ్",
        "nav.lessons": "పాఠాలు",
        "nav.results": "ఫలితాలు",
        "nav.logout": "లాగ్ అవుట్",
        "nav.login": "లాగిన్",
        "home.title": "Learn2Go కు స్వాగతం",
        "home.subtitle": "ట్రాఫిక్ నియమాలు & రోడ్ భద్రతను నేర్చుకోండి",
        "auth.login": "లాగిన్",
        "auth.signup": "Learn2Go లో చేరండి",
        "auth.username": "వినియోగదారు పేరు",
        "dashboard.welcome": "తిరిగి స్వాగతం",
        "dashboard.progress": "మీ భద్రతా ప్రోగ్రెస్",
        "dashboard.currentLevel": "ప్రస్తుత స్థాయి",
        "dashboard.completedLessons": "పూర్తైన పాఠాలు",
        "dashboard.badges": "భద్రతా బ్యాడ్జ్‌లు",
        "common.loading": "లోడ్ అవుతోంది...",
        "common.error": "దోషం",
        "common.success": "విజయం",
    },
    "hi": {
        "nav.home": "मुख्य पृष्ठ",
        "nav.dashboard": "डैशबोर्ड",
        "nav.lessons": "पाठ",
        "nav.results": "परिणाम",
        "nav.logout": "लॉग आउट",
        "nav.login": "लॉगिन",
        "home.title": "Learn2Go में आपका स्वागत है",
        "home.subtitle": "यातायात नियम और सड़क सुरक्षा सीखें",
        "auth.login": "लॉगिन",
        "auth.signup": "Learn2Go में शामिल हों",
        "auth.username": "उपयोगकर्ता नाम",
        "dashboard.welcome": "वापस स्वागत है",
        "dashboard.progress": "आपकी सुरक्षा प्रगति",
        "dashboard.currentLevel": "वर्तमान स्तर",
        "dashboard.completedLessons": "पूर्ण पाठ",
        "dashboard.badges": "सुरक्षा बैज",
        "common.loading": "लोड हो रहा है...",
        "common.error": "त्रुटि",
        "common.success": "सफलता",
    },
}


def translate(key: str, language: str) -> str:
    """Look up a UI string, falling back to English and then to the key."""
    table = TRANSLATIONS.get(language, {})
    if key in table:
        return table[key]
    return TRANSLATIONS[DEFAULT_LANGUAGE].get(key, key)


def get_table(language: str) -> dict[str, str]:
    """Full string table for a language with English filling the gaps."""
    merged = dict(TRANSLATIONS[DEFAULT_LANGUAGE])
    merged.update(TRANSLATIONS.get(language, {}))
    return merged
