"""Language inference from script statistics."""

import re

CJK_PATTERN = re.compile(r"[\u4e00-\u9fff]")


def count_cjk_chars(text: str) -> int:
    return len(CJK_PATTERN.findall(text))


def detect_language(text: str, threshold: float = 0.3) -> str:
    """Return 'zh-CN' when CJK characters make up more than threshold of text."""
    if not text:
        return "en"
    if count_cjk_chars(text) / len(text) > threshold:
        return "zh-CN"
    return "en"
