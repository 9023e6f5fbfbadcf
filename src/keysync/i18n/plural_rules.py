"""
CLDR plural category table, cardinal and ordinal
"""

import logging
from typing import Dict, List, Tuple

logger = logging.getLogger(__name__)

FALLBACK_LANGUAGE = 'en'

_OTHER = ('other',)
_ONE_OTHER = ('one', 'other')
_ONE_MANY_OTHER = ('one', 'many', 'other')
_ONE_FEW_OTHER = ('one', 'few', 'other')
_ONE_FEW_MANY_OTHER = ('one', 'few', 'many', 'other')
_ONE_TWO_OTHER = ('one', 'two', 'other')
_ONE_TWO_FEW_OTHER = ('one', 'two', 'few', 'other')
_ONE_TWO_FEW_MANY_OTHER = ('one', 'two', 'few', 'many', 'other')
_ALL = ('zero', 'one', 'two', 'few', 'many', 'other')


def _table(groups: List[Tuple[Tuple[str, ...], str]]) -> Dict[str, Tuple[str, ...]]:
    table: Dict[str, Tuple[str, ...]] = {}
    for categories, languages in groups:
        for language in languages.split():
            table[language] = categories
    return table


CARDINAL_CATEGORIES = _table([
    (_OTHER, 'bm bo dz id ig ii ja jbo jv kde kea km ko lo ms my nqo osa sah ses sg su th to tpi vi wo yo yue zh'),
    (_ONE_OTHER, 'af an asa ast az bal bem bez bg brx ce cgg chr ckb da de dv ee el en eo et eu fi fo fur fy '
                 'gl gsw ha haw hu hy ia io ji jgo jmc ka kaj kcg kk kkj kl ks ksb ku ky lb lg mas mgo ml mn mr '
                 'nah nb nd ne nl nn nnh no nr ny nyn om or os pap ps rm rof rwk saq sc sd sdh seh sn so sq ss '
                 'ssy st sv sw syr ta te teo tig tk tn tr ts ug ur uz ve vo vun wae xh xog yi zu '
                 'ak am as bho bn doz fa fil gu guw hi kn ln mg nso pa pcm si ti tl wa zu is mk ff hy kab'),
    (_ONE_MANY_OTHER, 'ca es fr it pt pt-pt vec lld'),
    (_ONE_FEW_OTHER, 'bs hr sh sr mo ro'),
    (_ONE_FEW_MANY_OTHER, 'be cs lt pl ru sk uk'),
    (_ONE_TWO_OTHER, 'he iu naq sat se sma smi smj smn sms'),
    (_ONE_TWO_FEW_OTHER, 'dsb hsb sl'),
    (_ONE_TWO_FEW_MANY_OTHER, 'br ga gv mt'),
    (('zero', 'one', 'other'), 'ksh lag lv prg'),
    (_ONE_TWO_FEW_OTHER, 'gd'),
    (_ALL, 'ar ars cy kw'),
])

ORDINAL_CATEGORIES = _table([
    (_ONE_TWO_FEW_OTHER, 'en ca gd mr'),
    (_ONE_OTHER, 'fil fr ga hy lo mo ms ne ro sv tl vi hu'),
    (('many', 'other'), 'it kk lij sc vec'),
    (('few', 'other'), 'be tk uk'),
    (_ONE_MANY_OTHER, 'ka sq'),
    (('one', 'two', 'many', 'other'), 'mk'),
    (('one', 'few', 'many', 'other'), 'az'),
    (_ONE_TWO_FEW_MANY_OTHER, 'as bn gu hi or'),
    (_ALL, 'cy'),
    (('few', 'other'), 'kw'),
])


def _normalize(locale: str) -> str:
    return (locale or '').strip().replace('_', '-').lower()


def get_plural_categories(locale: str, ordinal: bool = False) -> List[str]:
    """
    Get the plural categories of a locale

    Args:
        locale: BCP-47 style tag (e.g. 'en', 'pt-PT', 'zh_Hant')
        ordinal: Return ordinal instead of cardinal categories

    Returns:
        Categories in CLDR order ending with 'other'
    """
    normalized = _normalize(locale)
    language = normalized.split('-')[0]

    if ordinal:
        if normalized in ORDINAL_CATEGORIES:
            return list(ORDINAL_CATEGORIES[normalized])
        if language in ORDINAL_CATEGORIES:
            return list(ORDINAL_CATEGORIES[language])
        if language in CARDINAL_CATEGORIES:
            # known language without distinct ordinal forms
            return list(_OTHER)
        return list(ORDINAL_CATEGORIES[FALLBACK_LANGUAGE])

    if normalized in CARDINAL_CATEGORIES:
        return list(CARDINAL_CATEGORIES[normalized])
    if language in CARDINAL_CATEGORIES:
        return list(CARDINAL_CATEGORIES[language])

    logger.debug(f"No plural rules for locale '{locale}', using '{FALLBACK_LANGUAGE}'")
    return list(CARDINAL_CATEGORIES[FALLBACK_LANGUAGE])


def is_single_other(locale: str, ordinal: bool = False) -> bool:
    """Check whether a locale has no plural distinction at all"""
    return get_plural_categories(locale, ordinal) == ['other']
