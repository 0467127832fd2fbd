"""
Localized labels for dashboard output.
"""

from typing import Dict, List

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "en": {
        "title": "Vibe Coding Stats",
        "dashboardTitle": "Vibe Coding Dashboard",
        "totalTokens": "Total Tokens",
        "totalCost": "Total Cost",
        "dailyAverage": "Daily Average",
        "topModel": "Top Model",
        "lastDays": "Last {n} Days",
        "modelBreakdown": "Model Breakdown",
        "updated": "Updated",
        "tokens": "tokens",
        "poweredBy": "Powered by",
        "today": "Today",
        "thisWeek": "This Week",
        "thisMonth": "This Month",
        "allTime": "All Time",
        "periodUsage": "{period} Usage",
        "mergedFrom": "Merged from {n} sources",
        "estimatedNote": "Model and token figures are estimated from the share of cost in this period",
    },
    "ko": {
        "title": "Vibe 코딩 통계",
        "dashboardTitle": "Vibe 코딩 대시보드",
        "totalTokens": "총 토큰",
        "totalCost": "총 비용",
        "dailyAverage": "일 평균",
        "topModel": "주요 모델",
        "lastDays": "최근 {n}일",
        "modelBreakdown": "모델별 사용량",
        "updated": "업데이트",
        "tokens": "토큰",
        "poweredBy": "Powered by",
        "today": "오늘",
        "thisWeek": "이번 주",
        "thisMonth": "이번 달",
        "allTime": "전체 기간",
        "periodUsage": "{period} 사용량",
        "mergedFrom": "{n}개 소스에서 병합됨",
        "estimatedNote": "모델 및 토큰 수치는 이 기간의 비용 비율로 추정한 값입니다",
    },
    "ja": {
        "title": "Vibe コーディング統計",
        "dashboardTitle": "Vibe コーディングダッシュボード",
        "totalTokens": "総トークン",
        "totalCost": "総コスト",
        "dailyAverage": "日平均",
        "topModel": "主要モデル",
        "lastDays": "過去{n}日間",
        "modelBreakdown": "モデル別内訳",
        "updated": "更新日時",
        "tokens": "トークン",
        "poweredBy": "Powered by",
        "today": "今日",
        "thisWeek": "今週",
        "thisMonth": "今月",
        "allTime": "全期間",
        "periodUsage": "{period}の使用量",
        "mergedFrom": "{n}ソースから統合",
        "estimatedNote": "モデルとトークンの数値は期間内のコスト比率からの推定値です",
    },
}


def t(key: str, lang: str = "en", **params) -> str:
    """Translate a key, falling back to English and then to the key itself.

    Placeholders such as {n} are replaced from params.
    """
    strings = TRANSLATIONS.get(lang, TRANSLATIONS["en"])
    text = strings.get(key) or TRANSLATIONS["en"].get(key) or key

    for name, value in params.items():
        text = text.replace(f"{{{name}}}", str(value))

    return text


def get_translations(lang: str = "en") -> Dict[str, str]:
    """All labels for a language (English when unsupported)."""
    return TRANSLATIONS.get(lang, TRANSLATIONS["en"])


def is_language_supported(lang: str) -> bool:
    return lang in TRANSLATIONS


def get_supported_languages() -> List[str]:
    return list(TRANSLATIONS)
