"""Classification of raw ping output.

Ping output differs between platforms and, on Windows in particular, between
display languages. The functions here turn that text into a
:class:`~know_your_route.models.ProbeResult` without ever raising on input
they do not understand.

Example:
    >>> raw = "From 10.0.0.1 icmp_seq=1 Time to live exceeded"
    >>> classify_hop_output(raw, "8.8.8.8")
    ProbeResult(address='10.0.0.1', is_destination=False, rtt_ms=None, error=None)
"""

from __future__ import annotations

import re

from .models import ProbeResult

# First IPv4 or IPv6 looking token. IPv6 needs at least two colon groups so
# that "icmp_seq=1:" style fragments are not mistaken for addresses.
ADDRESS_RE = re.compile(
    r"((?:[0-9a-fA-F]{0,4}:){2,7}[0-9a-fA-F]{0,4}|\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})"
)

# Words ping uses in front of the round-trip time, per display language.
TIME_MARKERS = {
    "en": ("time", "ms"),
    "zh_CN": ("时间",),
    "zh_TW": ("時間",),
    "ja": ("時間",),
    "de": ("zeit",),
    "es": ("tiempo",),
    "fr": ("temps",),
    "it": ("tempo",),
    "pt": ("tempo",),
    "pl": ("czas",),
    "ru": ("время",),
    "ko": ("시간",),
}

SEQUENCE_MARKERS = ("icmp_seq", "seq", "bytes")


def _marker_pattern(markers) -> re.Pattern:
    words = sorted({m for m in markers}, key=len, reverse=True)
    return re.compile(
        r"(?:" + "|".join(re.escape(w) for w in words) + r")[=<]?\s*\d+", re.IGNORECASE
    )


TIME_EVIDENCE_RE = _marker_pattern(m for words in TIME_MARKERS.values() for m in words)
SEQUENCE_EVIDENCE_RE = re.compile(
    r"(?:" + "|".join(SEQUENCE_MARKERS) + r")[=<]\d+", re.IGNORECASE
)

# A millisecond value: "=15ms", "<1ms", " 15 ms".
RTT_RE = re.compile(r"([<>=]|\s)(\d+(?:\.\d+)?)\s*ms", re.IGNORECASE)

# Statistics summary, e.g. "1 packets transmitted, 0 received, 100% packet loss, time 0ms".
SUMMARY_RE = re.compile(r"packets? transmitted|packet loss", re.IGNORECASE)


def extract_address(line: str) -> str | None:
    """Return the first address-shaped token of a line, or None."""
    match = ADDRESS_RE.search(line)
    if not match:
        return None
    address = match.group(1)
    if address.endswith(":"):
        address = address[:-1]
    if len(address) < 2:
        return None
    return address


def extract_rtt(text: str) -> float | None:
    """Return the first millisecond value in ``text``, or None."""
    match = RTT_RE.search(text)
    if not match:
        return None
    return float(match.group(2))


def has_reply_evidence(line: str) -> bool:
    """Whether a line carries a time or sequence marker proving a reply."""
    return bool(TIME_EVIDENCE_RE.search(line) or SEQUENCE_EVIDENCE_RE.search(line))


def classify_hop_output(raw_text: str, target: str) -> ProbeResult:
    """Classify the output of a TTL-limited probe.

    Lines are scanned in order and the first qualifying one wins. An address
    other than the target is an intermediate hop. The target itself only
    counts when the same line proves a reply, since ping also echoes the
    target in its banner and summary.

    Args:
        raw_text: Output of the probe.
        target: Destination address of the probe.

    Returns:
        Hop reply, destination reply or timeout.
    """
    for line in raw_text.splitlines():
        address = extract_address(line)
        if address is None:
            continue

        if address != target:
            return ProbeResult(address=address)

        if has_reply_evidence(line):
            return ProbeResult(
                address=target, is_destination=True, rtt_ms=extract_rtt(line)
            )

    return ProbeResult()


def classify_echo_output(raw_text: str, target: str) -> ProbeResult:
    """Classify the output of a direct probe.

    Any millisecond value outside the statistics summary marks the probe as
    answered by ``target`` with that round-trip time; its absence marks it
    as lost. The summary is skipped because Linux reports the elapsed run
    time there ("time 0ms") even when nothing answered.
    """
    for line in raw_text.splitlines():
        if SUMMARY_RE.search(line):
            continue
        rtt = extract_rtt(line)
        if rtt is not None:
            return ProbeResult(address=target, is_destination=True, rtt_ms=rtt)
    return ProbeResult()
