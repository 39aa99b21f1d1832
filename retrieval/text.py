"""Text normalization shared by the local embedder, ranking and keyword search.

Abbreviations are expanded before tokenization so that short acronyms ("db",
"api") contribute the same tokens as their spelled-out forms.
"""

from __future__ import annotations

import re


ABBREVIATIONS: dict[str, str] = {
    # database & storage
    "db": "database",
    "sql": "structured query language sql",
    "nosql": "nosql database",
    "rdbms": "relational database management system",
    # languages & tooling
    "js": "javascript",
    "ts": "typescript",
    "py": "python",
    "npm": "node package manager npm",
    "jsx": "javascript jsx react",
    "tsx": "typescript tsx react",
    # web
    "api": "application programming interface api",
    "rest": "representational state transfer rest api",
    "http": "hypertext transfer protocol http",
    "https": "hypertext transfer protocol secure https",
    "url": "uniform resource locator url",
    "uri": "uniform resource identifier uri",
    "dns": "domain name system dns",
    "ssl": "secure sockets layer ssl",
    "tls": "transport layer security tls",
    # data formats
    "json": "javascript object notation json",
    "xml": "extensible markup language xml",
    "html": "hypertext markup language html",
    "css": "cascading style sheets css",
    "yaml": "yaml data format",
    # operations
    "crud": "create read update delete crud",
    "ci": "continuous integration",
    "cd": "continuous deployment",
    "cicd": "continuous integration continuous deployment",
    # interfaces & systems
    "ui": "user interface",
    "ux": "user experience",
    "cli": "command line interface",
    "gui": "graphical user interface",
    "ide": "integrated development environment",
    "sdk": "software development kit",
    "os": "operating system",
    # network & infrastructure
    "ip": "internet protocol ip address",
    "tcp": "transmission control protocol tcp",
    "udp": "user datagram protocol udp",
    "ftp": "file transfer protocol",
    "ssh": "secure shell ssh",
    "vpn": "virtual private network",
    "cdn": "content delivery network",
    "aws": "amazon web services aws cloud",
    # servers
    "nginx": "nginx web server",
    "apache": "apache web server",
    "node": "nodejs node",
    "nodejs": "nodejs node server",
    "express": "expressjs express server",
    # misc
    "err": "error",
    "auth": "authentication authorization",
    "cors": "cross origin resource sharing cors",
    "env": "environment",
    "config": "configuration",
    "admin": "administrator administration",
    "app": "application",
    "repo": "repository",
    "docs": "documentation",
    "pkg": "package",
    "lib": "library",
    "deps": "dependencies",
    "prod": "production",
    "dev": "development",
}

STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
        "be", "have", "has", "had", "do", "does", "did", "will", "would",
        "should", "could", "may", "might", "must", "this", "that", "these",
        "those", "i", "you", "he", "she", "it", "we", "they", "what", "which",
        "who", "when", "where", "why", "how", "can", "all", "each", "every",
        "some", "any",
    }
)

# Generic support-desk words that match almost every article.
NUISANCE_WORDS = frozenset({"get", "fix", "issue", "error", "problem"})

MIN_TOKEN_LENGTH = 3

# Longest keys first so "nodejs" wins over "node" inside the alternation.
_ABBREVIATION_RE = re.compile(
    r"\b("
    + "|".join(re.escape(k) for k in sorted(ABBREVIATIONS, key=len, reverse=True))
    + r")\b",
    re.IGNORECASE,
)
_NON_ALNUM_RE = re.compile(r"[\W_]+", re.UNICODE)
_WHITESPACE_RE = re.compile(r"\s+")


def expand_abbreviations(text: str) -> str:
    """Lowercase the text and expand known abbreviations in a single pass."""
    lowered = (text or "").lower()
    return _ABBREVIATION_RE.sub(lambda m: ABBREVIATIONS[m.group(1).lower()], lowered)


def normalize(text: str) -> str:
    expanded = expand_abbreviations(text)
    cleaned = _NON_ALNUM_RE.sub(" ", expanded)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def tokenize(text: str) -> list[str]:
    """Content words of ``text``: normalized, stopwords and short words removed."""
    normalized = normalize(text)
    if not normalized:
        return []
    return [
        word
        for word in normalized.split(" ")
        if len(word) >= MIN_TOKEN_LENGTH and word not in STOPWORDS
    ]


def extract_keywords(text: str) -> list[str]:
    """Unique query keywords in first-occurrence order."""
    words = [w for w in tokenize(text) if w not in NUISANCE_WORDS]
    return list(dict.fromkeys(words))


def tokenize_with_bigrams(text: str) -> list[str]:
    """Unigrams followed by ``w[i]_w[i+1]`` bigrams for adjacent pairs."""
    words = tokenize(text)
    bigrams = [f"{left}_{right}" for left, right in zip(words, words[1:])]
    return words + bigrams
