"""Search phrase extraction for the court-decision searcher."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence, Tuple

# ----------------------------
# Phrase dictionary
# ----------------------------

_MAX_QUERIES = 3
_MAX_WINDOW = 3
_AND_JOINER = " AND "


@dataclass(frozen=True)
class WeightedPhrase:
    phrase: str
    weight: int


SearchQuerySet = Tuple[str, ...]

# Weights reflect how specific a phrase is for a court search: a full
# "register place of residence" outranks a bare "court".
PHRASE_WEIGHTS: Mapping[str, int] = MappingProxyType({
    # Housing and residence (uk)
    "житло": 10,
    "мешканець": 9,
    "приватизація": 8,
    "реєстрація місця проживання": 10,
    "власник": 8,
    "колишній мешканець": 9,
    "виселення": 8,
    "звільнення житла": 9,
    "право власності": 7,
    "договір оренди": 7,
    "нерухомість": 7,
    "квартира": 6,
    "будинок": 6,
    "проживання": 7,
    "прописка": 8,
    "реєстрація": 7,
    "зареєструвати": 8,
    "зареєструвати місце проживання": 10,
    "повторно зареєструвати": 9,
    "не проживає": 8,
    "участі не брав": 7,
    "комунальні послуги": 6,
    "платить": 5,
    "не платить": 8,
    "хочеться виселити": 9,
    "захистити права": 7,
    "права власника": 8,
    "приватний будинок": 7,
    "власник житла": 10,

    # Inheritance and family (uk, ru)
    "спадщина": 8,
    "спадщину": 8,
    "спадщини": 8,
    "заповіт": 8,
    "наследство": 8,
    "завещание": 8,
    "розлучення": 7,
    "развод": 7,
    "аліменти": 7,
    "алименты": 7,

    # Courts and practice (uk, ru)
    "судова практика": 6,
    "юридична практика": 6,
    "надати судову практику": 6,
    "надати юридичну практику": 6,
    "адвокат": 5,
    "юрист": 5,
    "позов": 6,
    "иск": 6,
    "суд": 5,
    "закон": 4,
    "юридична допомога": 6,
    "консультація": 5,
    "юридична ситуація": 5,
    "ситуація": 4,
    "прошу надати": 4,
    "надати": 3,
    "прошу": 3,

    # Case numbers (uk, ru)
    "номера справ": 10,
    "номера дел": 10,
    "номер справи": 9,
    "номер дела": 9,
    "судові справи": 9,
    "судебные дела": 9,
    "справи": 8,
    "дела": 8,

    # Military registration (uk, ru)
    "тцк": 7,
    "мобілізація": 7,
    "мобилизация": 7,
    "повістка": 7,
    "повестка": 7,
    "відстрочка": 8,
    "отсрочка": 8,
    "військовий облік": 8,
    "воинский учет": 8,

    # Housing (ru)
    "власник жилья": 10,
    "собственник жилья": 10,
    "собственник жилплощади": 10,
    "бывший жилец": 9,
    "бывший житель": 9,
    "бывший квартирант": 9,
    "не живет": 8,
    "не обитает": 8,
    "давно не проживает": 9,
    "давно не живет": 9,
    "участие не принимал": 7,
    "участия не принимал": 7,
    "приватизации не участвовал": 8,
    "хочет зарегистрироваться": 9,
    "хочет прописаться": 9,
    "повторная регистрация": 9,
    "повторно зарегистрироваться": 9,
    "место проживания": 8,
    "место жительства": 8,
    "жилищный вопрос": 8,
    "жилищная проблема": 8,
    "жилищное право": 8,
    "выселение жильца": 9,
    "выселение бывшего жильца": 10,
    "освобождение жилплощади": 9,
    "защита прав собственника": 8,
    "жилищное законодательство": 7,
    "жилищный кодекс": 7,
})


# ----------------------------
# Public API
# ----------------------------

def extract_weighted_phrases(text: str) -> list[WeightedPhrase]:
    """
    Every dictionary phrase found in text, in scan order.

    At each token position the 3-, 2- and 1-token windows are tested against
    PHRASE_WEIGHTS (exact match only). Overlapping matches are all kept.
    """
    tokens = (text or "").lower().split()
    found: list[WeightedPhrase] = []

    for i in range(len(tokens)):
        for size in range(_MAX_WINDOW, 0, -1):
            if i + size > len(tokens):
                continue
            candidate = " ".join(tokens[i:i + size])
            weight = PHRASE_WEIGHTS.get(candidate)
            if weight is not None:
                found.append(WeightedPhrase(candidate, weight))

    return found


def extract_search_queries(text: str) -> SearchQuerySet:
    """
    Pick up to 3 unique search phrases, heaviest first.

    Ties keep the phrase that occurs first in the text (stable sort over the
    scan order). An empty result means nothing in the text is searchable.
    """
    ranked = sorted(extract_weighted_phrases(text), key=lambda p: -p.weight)

    picked: list[str] = []
    seen: set[str] = set()
    for item in ranked:
        if item.phrase in seen:
            continue
        seen.add(item.phrase)
        picked.append(item.phrase)
        if len(picked) >= _MAX_QUERIES:
            break

    return tuple(picked)


def combine_queries(phrases: Sequence[str]) -> str:
    return _AND_JOINER.join(phrases)
