import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationResult:
    matched: bool
    confidence: float
    language: Optional[str]


@dataclass(frozen=True)
class OverrideRule:
    """Fires when any trigger term is present and, if given, any companion term too."""

    name: str
    triggers: Tuple[str, ...]
    companions: Tuple[str, ...] = ()

    def fires(self, lowered: str) -> bool:
        if not _contains_any(lowered, self.triggers):
            return False
        return not self.companions or _contains_any(lowered, self.companions)


LEGAL_THRESHOLD = 0.1
_KEYWORD_WEIGHT = 0.7
_PATTERN_WEIGHT = 0.3

_LANGUAGE_NAMES: Dict[str, str] = {
    "en": "English",
    "ru": "Russian",
    "uk": "Ukrainian",
    "ja": "Japanese",
    "fr": "French",
}

# Matched as case-insensitive substrings, so several entries are stems.
LEGAL_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "uk": (
        "закон", "право", "юридичн", "адвокат", "суд", "позов", "договір", "угода",
        "законодавств", "нормативн", "правов", "юрист", "консультаці",
        "відповідальн", "порушенн", "штраф", "ліцензі", "патент", "авторськ",
        "спадщин", "заповіт", "розлученн", "аліменти", "нерухоміст", "реєстраці",
        "громадянств", "оформити", "отримати", "подати", "заяв", "документи",
        "нотаріус", "свідоцтв", "власніст", "майно", "борг", "кредит", "страхов",
        "житло", "мешканець", "приватизаці", "місце проживання",
        "судова практика", "юридична практика", "тцк", "територіальн",
        "комплектуванн", "армі", "військов", "справ", "номер", "список",
        "знайди", "виведи", "власник житла", "не проживає", "участі не брав",
        "повторно зареєструвати", "прошу надати", "ситуаці",
    ),
    "ru": (
        "закон", "право", "юридическ", "адвокат", "суд", "исков", "подать иск",
        "договор", "соглашени", "законодательств", "нормативн", "правов", "юрист",
        "консультаци", "ответственност", "нарушени", "штраф", "лицензи", "патент",
        "авторск", "наследств", "завещани", "развод", "алимент", "недвижимост",
        "регистраци", "гражданств", "оформить", "получить", "подать", "заявлени",
        "документ", "нотариус", "свидетельств", "собственност", "имуществ", "долг",
        "кредит", "страховк", "жиль", "жилищн", "выселени", "прописк",
        "приватизаци", "тцк", "территориальн", "комплектовани", "арми", "военн",
        "дело", "номер", "список", "найди", "найти", "выведи",
    ),
    "en": (
        "law", "legal", "attorney", "lawyer", "court", "case", "contract", "agreement",
        "legislation", "regulation", "legal advice", "consultation", "liability",
        "violation", "fine", "license", "patent", "copyright", "inheritance",
        "divorce", "alimony", "real estate", "registration", "citizenship",
        "file", "apply", "document", "notary", "certificate", "property",
        "debt", "credit", "insurance",
    ),
}

LEGAL_PATTERNS: Dict[str, Tuple[Pattern[str], ...]] = {
    "uk": tuple(re.compile(p, re.IGNORECASE) for p in (
        r"(?:питання|консультація|допомога).*(?:щодо|про|стосовно).*(?:закон|право|юридичний)",
        r"(?:як|що|де).*(?:закон|право|юридичний)",
        r"(?:потрібна|потрібно).*(?:юридична|правова).*(?:консультація|допомога)",
        r"(?:адвокат|юрист).*(?:ситуація|випадок)",
        r"(?:прошу|запитую).*(?:надати).*(?:судову практику|юридичну практику)",
    )),
    "ru": tuple(re.compile(p, re.IGNORECASE) for p in (
        r"(?:вопрос|консультация|помощь).*(?:по|о|насчет).*(?:закон|право|юридический)",
        r"(?:как|что|где).*(?:закон|право|юридический)",
        r"(?:требуется|нужна).*(?:юридическая|правовая).*(?:консультация|помощь)",
    )),
    "en": tuple(re.compile(p, re.IGNORECASE) for p in (
        r"(?:question|consultation|help).*(?:regarding|about|concerning).*(?:law|legal)",
        r"(?:how|what|where).*(?:law|legal)",
        r"(?:need|require).*(?:legal).*(?:advice|consultation|help)",
    )),
}

# Short two-keyword utterances score too low on ratios alone.
# TODO: decide whether these should become heavier dictionary entries instead.
OVERRIDE_RULES: Tuple[OverrideRule, ...] = (
    OverrideRule("inheritance", ("наследство", "inheritance", "спадщин")),
    OverrideRule("ru_file_documents", ("оформить",), ("документ", "заявление")),
    OverrideRule("uk_file_documents", ("подати",), ("заяв", "документ")),
    OverrideRule("en_file_documents", ("file",), ("document", "application")),
)

# --- Military registration (TCC) ---
_TCC_KEYWORDS: Tuple[str, ...] = (
    "тцк",
    "tcc",
    "військкомат",
    "военкомат",
    "територіальний центр комплектування",
    "территориальный центр комплектования",
)

_TCC_ADMIN_TERMS: Tuple[str, ...] = (
    "військов", "военн", "призов", "мобіліз", "мобилиз", "повістк", "повестк",
    "облік", "учет", "відстроч", "отсроч", "справ", "дело", "номер", "список",
    "military", "draft", "conscription", "summons", "case",
)

_CASE_LOOKUP_TERMS: Tuple[str, ...] = (
    "найди", "найти", "знайди", "список", "дело", "справ", "номер",
    "find", "list", "case", "number",
)


def _normalize(text: str) -> str:
    t = (text or "").strip().lower()
    t = re.sub(r"\s+", " ", t)
    return t


def _contains_any(haystack: str, needles: Tuple[str, ...]) -> bool:
    return any(n in haystack for n in needles)


def language_name(code: Optional[str]) -> str:
    return _LANGUAGE_NAMES.get(code or "", "English")


def fired_overrides(text: str) -> Tuple[str, ...]:
    q = _normalize(text)
    return tuple(rule.name for rule in OVERRIDE_RULES if rule.fires(q))


def classify_legal_request(user_text: str) -> ClassificationResult:
    """
    Deterministic multilingual legal-question detector.

    Per language: confidence = 0.7 * keyword hit ratio + 0.3 * pattern hit ratio.
    The best language wins (ties keep the earlier one). The text is legal when
    confidence exceeds LEGAL_THRESHOLD or an override rule fires.
    """
    raw = user_text or ""
    q = _normalize(raw)

    best_confidence = 0.0
    best_language: Optional[str] = None

    for lang, keywords in LEGAL_KEYWORDS.items():
        keyword_hits = sum(1 for kw in keywords if kw in q)
        keyword_ratio = keyword_hits / len(keywords) if keywords else 0.0

        patterns = LEGAL_PATTERNS.get(lang, ())
        pattern_hits = sum(1 for p in patterns if p.search(raw))
        pattern_ratio = pattern_hits / len(patterns) if patterns else 0.0

        confidence = keyword_ratio * _KEYWORD_WEIGHT + pattern_ratio * _PATTERN_WEIGHT
        if confidence > best_confidence:
            best_confidence = confidence
            best_language = lang

    overrides = fired_overrides(raw)
    matched = best_confidence > LEGAL_THRESHOLD or bool(overrides)

    logger.debug(
        "legal_intent",
        extra={
            "matched": matched,
            "confidence": round(best_confidence, 4),
            "language": best_language,
            "overrides": list(overrides),
        },
    )

    return ClassificationResult(
        matched=matched,
        confidence=best_confidence,
        language=best_language,
    )


def is_tcc_request(user_text: str) -> bool:
    """Recruitment-office keyword plus at least one administrative term."""
    q = _normalize(user_text)
    return _contains_any(q, _TCC_KEYWORDS) and _contains_any(q, _TCC_ADMIN_TERMS)


def wants_case_lookup(user_text: str) -> bool:
    return _contains_any(_normalize(user_text), _CASE_LOOKUP_TERMS)
