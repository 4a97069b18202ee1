# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

from enum import Enum


class Sentiment(Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Urgency(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Impact(Enum):
    CRITICAL = "critical"
    FEATURE_REQUEST = "feature_request"
    NICE_TO_HAVE = "nice_to_have"


class FeedbackSource(Enum):
    MANUAL = "manual"
    CSV = "csv"


class ChatRole(Enum):
    USER = "user"
    ASSISTANT = "assistant"


class SortKey(Enum):
    """Orderings supported by the feedback table."""

    DATE = "date"
    SENTIMENT = "sentiment"
    URGENCY = "urgency"
    IMPACT = "impact"


# Rank of each label when sorting; lower ranks sort first.
SENTIMENT_RANK = {
    Sentiment.NEGATIVE.value: 0,
    Sentiment.NEUTRAL.value: 1,
    Sentiment.POSITIVE.value: 2,
}
URGENCY_RANK = {
    Urgency.HIGH.value: 0,
    Urgency.MEDIUM.value: 1,
    Urgency.LOW.value: 2,
}
IMPACT_RANK = {
    Impact.CRITICAL.value: 0,
    Impact.FEATURE_REQUEST.value: 1,
    Impact.NICE_TO_HAVE.value: 2,
}
