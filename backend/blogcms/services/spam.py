from __future__ import annotations
import re

# Baseline screen used only when the AI classifier gives no verdict.
URL_RE = re.compile(r"https?://[^\s]+", re.IGNORECASE)
MAX_URLS = 2

SPAM_PATTERNS = (
    re.compile(r"\b(viagra|cialis|casino|poker|lottery|winner|prize)\b", re.IGNORECASE),
    re.compile(r"\b(click here|buy now|free money|work from home)\b", re.IGNORECASE),
    # same character 11+ times in a row; case-sensitive so "aAaA..." is not a repeat
    re.compile(r"(.)\1{10,}"),
)

SUSPICIOUS_EMAIL_PATTERNS = (
    re.compile(r"^[a-z0-9]{20,}@", re.IGNORECASE),
    re.compile(r"@(guerrillamail|mailinator|10minutemail|tempmail)", re.IGNORECASE),
    re.compile(r"^(test|spam|xxx|admin|root)@", re.IGNORECASE),
)


def is_spam(text: str) -> bool:
    if len(URL_RE.findall(text)) > MAX_URLS:
        return True
    return any(p.search(text) for p in SPAM_PATTERNS)


def is_suspicious_email(email: str) -> bool:
    """Advisory flag for moderators. Never feeds the automatic decision."""
    return any(p.search(email.strip()) for p in SUSPICIOUS_EMAIL_PATTERNS)
