"""
Text clean-up so speech synthesis reads digests naturally.

Markdown is stripped, acronyms are spelled out with dots so they are read
letter by letter, and common abbreviations are expanded to full words.
"""

import re

ACRONYMS = {
    "AI": "A.I.",
    "API": "A.P.I.",
    "APIs": "A.P.I.s",
    "AWS": "A.W.S.",
    "CEO": "C.E.O.",
    "CLI": "C.L.I.",
    "CPU": "C.P.U.",
    "CSS": "C.S.S.",
    "CTO": "C.T.O.",
    "DB": "D.B.",
    "DL": "D.L.",
    "FAQ": "F.A.Q.",
    "GCP": "G.C.P.",
    "GPU": "G.P.U.",
    "GPUs": "G.P.U.s",
    "HTML": "H.T.M.L.",
    "HTTP": "H.T.T.P.",
    "HTTPS": "H.T.T.P.S.",
    "IDE": "I.D.E.",
    "IoT": "I.o.T.",
    "JSON": "J.S.O.N.",
    "LLM": "L.L.M.",
    "LLMs": "L.L.M.s",
    "ML": "M.L.",
    "NLP": "N.L.P.",
    "OSS": "O.S.S.",
    "RAG": "R.A.G.",
    "REST": "R.E.S.T.",
    "SDK": "S.D.K.",
    "SDKs": "S.D.K.s",
    "SQL": "S.Q.L.",
    "SaaS": "S.a.a.S.",
    "SSH": "S.S.H.",
    "SSL": "S.S.L.",
    "TTS": "T.T.S.",
    "UI": "U.I.",
    "URL": "U.R.L.",
    "URLs": "U.R.L.s",
    "USB": "U.S.B.",
    "UX": "U.X.",
    "VPN": "V.P.N.",
    "XSS": "X.S.S.",
}

ABBREVIATIONS = {
    "vs.": "versus",
    "e.g.": "for example",
    "i.e.": "that is",
    "etc.": "etcetera",
    "approx.": "approximately",
}

# Longest first so plural forms win over their singular prefix
_ACRONYM_PATTERN = re.compile(
    r"\b("
    + "|".join(re.escape(a) for a in sorted(ACRONYMS, key=len, reverse=True))
    + r")\b"
)

_MARKDOWN_RULES = [
    (re.compile(r"```.*?```", re.DOTALL), ""),
    (re.compile(r"!\[([^\]]*)\]\([^)]*\)"), r"\1"),
    (re.compile(r"\[([^\]]+)\]\([^)]*\)"), r"\1"),
    (re.compile(r"^#{1,6}\s+", re.MULTILINE), ""),
    (re.compile(r"(\*{1,3}|_{1,3})([^*_]+)\1"), r"\2"),
    (re.compile(r"`([^`]+)`"), r"\1"),
    (re.compile(r"^>\s?", re.MULTILINE), ""),
    (re.compile(r"^\s*[-*_]{3,}\s*$", re.MULTILINE), ""),
    (re.compile(r"^\s*[-*+]\s+", re.MULTILINE), ""),
    (re.compile(r"^\s*\d+\.\s+", re.MULTILINE), ""),
    (re.compile(r"\n{3,}"), "\n\n"),
]

_WHITESPACE = re.compile(r"\s+")


def strip_markdown(text: str) -> str:
    """Remove markdown syntax, keeping link text and image alt text."""
    result = text
    for pattern, replacement in _MARKDOWN_RULES:
        result = pattern.sub(replacement, result)
    return result.strip()


def expand_acronyms(text: str) -> str:
    """Expand known acronyms (whole words only) to dotted form."""
    return _ACRONYM_PATTERN.sub(lambda m: ACRONYMS[m.group(1)], text)


def expand_abbreviations(text: str) -> str:
    for abbreviation, expansion in ABBREVIATIONS.items():
        text = text.replace(abbreviation, expansion)
    return text


def preprocess_for_tts(text: str) -> str:
    """Full clean-up pipeline applied before speech synthesis."""
    if not text:
        return ""
    result = strip_markdown(text)
    result = expand_acronyms(result)
    result = expand_abbreviations(result)
    return _WHITESPACE.sub(" ", result).strip()
