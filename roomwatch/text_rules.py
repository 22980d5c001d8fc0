"""Pattern rules for pulling listing fields out of rendered free text.

Used only when a page exposes its data as plain text nodes instead of
stable markup. Every rule keys on a Japanese marker (a unit such as 万円,
階 or ㎡, or a label character such as 敷/礼) anchored directly to the value,
so results are lower-confidence than selector-based extraction and should be
treated as a fallback.
"""
import re
from dataclasses import dataclass
from roomwatch.normalize import collapse_whitespace


@dataclass(frozen=True)
class TextRule:
    name: str
    patterns: tuple[re.Pattern, ...]
    template: str = "{0}"

    def _render(self, match: re.Match) -> str:
        groups = [collapse_whitespace(g).replace(" ", "") for g in match.groups(default="")]
        return self.template.format(*groups)

    def find(self, text: str) -> str:
        """Return the first match rendered through the template, or ""."""
        if not text:
            return ""
        for pattern in self.patterns:
            match = pattern.search(text)
            if match:
                return self._render(match)
        return ""

    def find_all(self, text: str) -> list[str]:
        if not text:
            return []
        found = []
        for pattern in self.patterns:
            for match in pattern.finditer(text):
                value = self._render(match)
                if value not in found:
                    found.append(value)
        return found


def _rule(name: str, *patterns: str, template: str = "{0}") -> TextRule:
    return TextRule(name, tuple(re.compile(p) for p in patterns), template)


_MONTHS = r"\d+(?:\.\d+)?\s*(?:ヶ月|ヵ月|か月|カ月)"
_YEN = r"\d+(?:\.\d+)?\s*万円|[\d,]+\s*円"
_NONE = r"なし|無し|無|-|－"

RENT = _rule("rent", r"(\d+(?:\.\d+)?)\s*万円", template="{0}万円")
MANAGEMENT_FEE = _rule(
    "management_fee",
    rf"万円\s*/\s*([\d,]+\s*円|{_NONE})",
    rf"管理費(?:・共益費)?\s*[:：]?\s*({_YEN}|{_NONE})",
)
DEPOSIT = _rule("deposit", rf"敷(?:金)?\s*[:：]?\s*({_MONTHS}|{_YEN}|{_NONE})")
GRATUITY = _rule("gratuity", rf"礼(?:金)?\s*[:：]?\s*({_MONTHS}|{_YEN}|{_NONE})")
LAYOUT = _rule("layout", r"(ワンルーム|\d+R|\d+S?L?D?K)(?![A-Za-z])")
AREA = _rule("area", r"(\d+(?:\.\d+)?)\s*(?:m²|㎡|m2|平米)", template="{0}m²")
FLOOR = _rule("floor", r"((?:地下|B)?\d+)\s*階(?!建)", template="{0}階")
AGE = _rule("age", r"(築\s*\d+\s*年|新築)")
STATION_ACCESS = _rule(
    "station_access",
    r"([^\s/、,]+駅)\s*(?:徒歩|歩)\s*(\d+)\s*分",
    template="{0} 徒歩{1}分",
)
ADDRESS = _rule("address", r"((?:東京都|北海道|大阪府|京都府|[^\s\d/]{2,3}県)[^\s/]+)")
RESULT_COUNT = _rule(
    "result_count",
    r"(?:検索結果|該当物件数|該当)\s*[:：]?\s*(\d[\d,]*)\s*件",
    r"(\d[\d,]*)\s*件の物件",
    r"^\s*(\d[\d,]*)\s*件",
)

FIELD_RULES = {
    "rent": RENT,
    "management_fee": MANAGEMENT_FEE,
    "deposit": DEPOSIT,
    "gratuity": GRATUITY,
    "layout": LAYOUT,
    "area": AREA,
    "floor": FLOOR,
    "age": AGE,
}


def fields_from_text(text: str) -> dict:
    """Apply every field rule to one blob of rendered text."""
    fields = {name: rule.find(text) for name, rule in FIELD_RULES.items()}
    fields["address"] = ADDRESS.find(text)
    fields["access"] = STATION_ACCESS.find_all(text)
    return fields


def discover_result_count(text: str) -> int | None:
    value = RESULT_COUNT.find(text)
    if not value:
        return None
    return int(value.replace(",", ""))
