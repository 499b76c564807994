"""
Synthetic content generation for the `logs` table.

Three size classes, each a strict superset of the previous one by field name:

- small:  9 scalar event fields.
- medium: small + 46 network/billing/geo/session fields, two of them
          multi-byte (Japanese) free text.
- large:  medium + 500 flat fields, 200 Japanese text fields, 100 nested
          objects (10 sub-fields each) and 50 string arrays (1-20 items).

All randomness flows through one `random.Random` instance, UUIDs included,
so a seeded generator reproduces the same document sequence.
"""

from __future__ import annotations

import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from logbench.domain.models import ContentDocument, ContentSize

DOMAINS = (
    "example.com", "test.org", "demo.net", "app.io", "api.service.com",
    "web.portal.com", "mobile.app.net", "admin.system.org", "user.platform.io",
    "data.analytics.com", "payments.service.net", "content.media.org", "social.platform.io",
)

EVENT_ACTIONS = (
    "user_login", "user_logout", "page_view", "button_click", "form_submit",
    "file_upload", "file_download", "search_query", "filter_apply", "sort_change",
    "create_record", "update_record", "delete_record", "export_data", "import_data",
    "send_message", "receive_message", "share_content", "like_post", "comment_post",
    "subscribe", "unsubscribe", "follow_user", "unfollow_user", "report_issue",
    "request_feature", "update_settings", "change_password", "reset_password",
)

USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 14_7_1 like Mac OS X)",
    "Mozilla/5.0 (Android 11; Mobile; rv:68.0) Gecko/68.0 Firefox/88.0",
)
CONTENT_ACTIONS = (
    "login", "logout", "view", "click", "purchase", "search", "filter",
    "create", "update", "delete", "download", "upload", "share", "comment",
    "like", "dislike", "subscribe", "unsubscribe", "follow", "unfollow",
)
STATUSES = ("success", "failure", "pending", "timeout", "error", "warning", "info")
PROTOCOLS = ("HTTP", "HTTPS", "WebSocket", "gRPC", "TCP", "UDP")
ERROR_CODES = ("200", "201", "400", "401", "403", "404", "500", "502", "503", "504")
REGIONS = ("us-east-1", "us-west-2", "eu-west-1", "ap-southeast-1", "ap-northeast-1")
ENVIRONMENTS = ("production", "staging", "development", "testing")
FEATURE_FLAGS = ("new_ui", "beta_search", "advanced_analytics", "real_time_sync", "auto_backup")
SEGMENTS = ("premium", "basic", "trial", "enterprise", "free")
TIERS = ("bronze", "silver", "gold", "platinum", "diamond")
PLANS = ("starter", "professional", "business", "enterprise", "custom")
COUNTRIES = ("US", "UK", "CA", "AU", "DE", "FR", "JP", "SG", "IN", "BR")
CITIES = (
    "New York", "London", "Toronto", "Sydney", "Berlin",
    "Paris", "Tokyo", "Singapore", "Mumbai", "São Paulo",
)
TIMEZONES = ("UTC", "America/New_York", "Europe/London", "Asia/Tokyo", "Australia/Sydney")
LANGUAGES = ("en", "es", "fr", "de", "ja", "zh", "pt", "ru", "ar", "hi")
CURRENCIES = ("USD", "EUR", "GBP", "JPY", "CAD", "AUD", "CHF", "CNY", "INR", "BRL")

LARGE_FLAT_FIELDS = 500
LARGE_TEXT_FIELDS = 200
LARGE_NESTED_OBJECTS = 100
NESTED_OBJECT_FIELDS = 10
LARGE_ARRAY_FIELDS = 50
MAX_ARRAY_ITEMS = 20

# (start, end) code point ranges, inclusive: hiragana, katakana, a kanji subset.
_JAPANESE_RANGES = ((0x3040, 0x309F), (0x30A0, 0x30FF), (0x4E00, 0x4E00 + 0x0FFF))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentGenerator:
    """
    Produce synthetic content documents.

    Parameters
    ----------
    rng : random.Random | None
        Random source. Pass `random.Random(seed)` for reproducible output.
    clock : callable | None
        Returns the "now" used for timestamp-like fields.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.rng = rng or random.Random()
        self.clock = clock or _utcnow

    def generate(self, size: ContentSize | str) -> ContentDocument:
        size = ContentSize(size)
        if size is ContentSize.LARGE:
            return self._large()
        if size is ContentSize.MEDIUM:
            return self._medium()
        return self._small()

    # Identity helpers shared with the bulk loader

    def uuid4(self) -> uuid.UUID:
        return uuid.UUID(int=self.rng.getrandbits(128), version=4)

    def random_domain(self) -> str:
        return self.rng.choice(DOMAINS)

    def random_action(self) -> str:
        return self.rng.choice(EVENT_ACTIONS)

    def japanese_text(self, length: int) -> str:
        chars = []
        for _ in range(length):
            start, end = self.rng.choice(_JAPANESE_RANGES)
            chars.append(chr(self.rng.randint(start, end)))
        return "".join(chars)

    # Size classes

    def _small(self) -> ContentDocument:
        rng = self.rng
        return {
            "event_id": str(self.uuid4()),
            "session_id": f"sess_{rng.randrange(100_000)}",
            "ip_address": f"192.168.{rng.randrange(255)}.{rng.randrange(255)}",
            "user_agent": rng.choice(USER_AGENTS),
            "timestamp": int(self.clock().timestamp()),
            "action_type": rng.choice(CONTENT_ACTIONS),
            "status": rng.choice(STATUSES),
            "duration": rng.randrange(5000) + 100,
            "device_id": f"device_{rng.randrange(10_000)}",
        }

    def _medium(self) -> ContentDocument:
        rng = self.rng
        now = self.clock()
        content = self._small()
        content.update(
            {
                "request_id": str(self.uuid4()),
                "correlation_id": f"corr_{rng.randrange(1_000_000)}",
                "source_ip": f"10.0.{rng.randrange(255)}.{rng.randrange(255)}",
                "destination_ip": f"172.16.{rng.randrange(255)}.{rng.randrange(255)}",
                "protocol": rng.choice(PROTOCOLS),
                "port": rng.randrange(65_535),
                "bytes_sent": rng.randrange(1_000_000),
                "bytes_received": rng.randrange(1_000_000),
                "latency": rng.randrange(1000),
                "error_code": rng.choice(ERROR_CODES),
                "retry_count": rng.randrange(5),
                "cache_hit": rng.random() < 0.5,
                "compression": rng.random() < 0.5,
                "encrypted": rng.random() < 0.5,
                "region": rng.choice(REGIONS),
                "datacenter": f"dc-{rng.randrange(10) + 1}",
                "service_version": (
                    f"v{rng.randrange(5) + 1}.{rng.randrange(10)}.{rng.randrange(20)}"
                ),
                "build_number": rng.randrange(10_000),
                "environment": rng.choice(ENVIRONMENTS),
                "tenant_id": str(self.uuid4()),
                "org_id": f"org_{rng.randrange(1000)}",
                "team_id": f"team_{rng.randrange(100)}",
                "project_id": f"proj_{rng.randrange(50)}",
                "feature_flag": rng.choice(FEATURE_FLAGS),
                "ab_test": f"test_{rng.randrange(100)}",
                "experiment_id": str(self.uuid4()),
                "segment": rng.choice(SEGMENTS),
                "cohort": f"cohort_{rng.randrange(10) + 1}",
                "tier": rng.choice(TIERS),
                "plan": rng.choice(PLANS),
                "quota": rng.randrange(10_000),
                "usage": rng.randrange(1000),
                "limit": rng.randrange(5000),
                "remaining": rng.randrange(1000),
                "renewal_date": (now + timedelta(days=30 * rng.randrange(12))).date().isoformat(),
                "last_login": (now - timedelta(seconds=rng.randrange(86_400))).isoformat(),
                "first_login": (now - timedelta(seconds=rng.randrange(86_400 * 30))).isoformat(),
                "session_count": rng.randrange(100),
                "total_sessions": rng.randrange(1000),
                "country": rng.choice(COUNTRIES),
                "city": rng.choice(CITIES),
                "timezone": rng.choice(TIMEZONES),
                "language": rng.choice(LANGUAGES),
                "currency": rng.choice(CURRENCIES),
                "description": self.japanese_text(rng.randrange(100) + 20),
                "notes": self.japanese_text(rng.randrange(50) + 10),
            }
        )
        return content

    def _large(self) -> ContentDocument:
        rng = self.rng
        content = self._medium()

        for i in range(LARGE_FLAT_FIELDS):
            content[f"field_{i}"] = f"value_{rng.randrange(100_000)}_{self.japanese_text(5)}"

        for i in range(LARGE_TEXT_FIELDS):
            content[f"japanese_field_{i}"] = self.japanese_text(rng.randrange(100) + 20)

        for i in range(LARGE_NESTED_OBJECTS):
            nested: Dict[str, str] = {}
            for j in range(NESTED_OBJECT_FIELDS):
                nested[f"nested_field_{j}"] = (
                    f"nested_value_{rng.randrange(1000)}_{self.japanese_text(5)}"
                )
            content[f"nested_obj_{i}"] = nested

        for i in range(LARGE_ARRAY_FIELDS):
            content[f"array_field_{i}"] = [
                f"array_item_{i}_{j}_{self.japanese_text(5)}"
                for j in range(rng.randrange(MAX_ARRAY_ITEMS) + 1)
            ]

        return content


__all__ = ["ContentGenerator", "DOMAINS", "EVENT_ACTIONS"]
