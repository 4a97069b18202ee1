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

import unittest
from unittest.mock import MagicMock, patch

from google.genai import errors
from pydantic import BaseModel

from models import gemini


class Labels(BaseModel):
    sentiment: str
    urgency: str


def _response(text=None, parsed=None):
    response = MagicMock()
    response.text = text
    response.parsed = parsed
    return response


@patch("models.gemini.genai.Client")
class GeminiTest(unittest.TestCase):

    @patch("models.api_config.DEFAULT_API_KEY", None)
    def test_missing_api_key(self, mock_client_cls):
        with self.assertRaisesRegex(
            gemini.GeminiConfigurationError, "GEMINI_API_KEY not configured"
        ):
            gemini.call_predict("hello")
        mock_client_cls.assert_not_called()

    def test_call_predict_returns_text(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.models.generate_content.return_value = _response(text="digest body")

        result = gemini.call_predict(
            "prompt", system_instruction="system", temperature=0.7, api_key="key"
        )

        self.assertEqual(result, "digest body")
        mock_client_cls.assert_called_once_with(api_key="key")
        config = client.models.generate_content.call_args.kwargs["config"]
        self.assertEqual(config.system_instruction, "system")
        self.assertEqual(config.temperature, 0.7)

    def test_call_predict_empty_response(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.models.generate_content.return_value = _response(text="")
        with self.assertRaises(gemini.GeminiInvalidResponseException):
            gemini.call_predict("prompt", api_key="key")

    def test_api_error_is_wrapped(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.models.generate_content.side_effect = errors.APIError(
            429, {"error": {"message": "quota exceeded", "status": "RESOURCE_EXHAUSTED"}}
        )
        with self.assertRaisesRegex(gemini.GeminiApiError, "Gemini API error: 429"):
            gemini.call_predict("prompt", api_key="key")

    def test_schema_uses_parsed_object(self, mock_client_cls):
        labels = Labels(sentiment="positive", urgency="low")
        client = mock_client_cls.return_value
        client.models.generate_content.return_value = _response(
            text="ignored", parsed=labels
        )

        result = gemini.call_predict_with_schema("prompt", Labels, api_key="key")

        self.assertIs(result, labels)
        config = client.models.generate_content.call_args.kwargs["config"]
        self.assertEqual(config.response_mime_type, "application/json")

    def test_schema_falls_back_to_fenced_text(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.models.generate_content.return_value = _response(
            text='```json\n{"sentiment": "negative", "urgency": "high"}\n```'
        )

        result = gemini.call_predict_with_schema("prompt", Labels, api_key="key")

        self.assertEqual(result, Labels(sentiment="negative", urgency="high"))

    def test_schema_malformed_text(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.models.generate_content.return_value = _response(text="not json")
        with self.assertRaises(gemini.GeminiInvalidResponseException):
            gemini.call_predict_with_schema("prompt", Labels, api_key="key")

    def test_call_chat_maps_roles(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.models.generate_content.return_value = _response(text="answer")

        result = gemini.call_chat(
            [
                {"role": "user", "content": "q1"},
                {"role": "assistant", "content": "a1"},
                {"role": "user", "content": "q2"},
            ],
            system_instruction="context",
            api_key="key",
        )

        self.assertEqual(result, "answer")
        contents = client.models.generate_content.call_args.kwargs["contents"]
        self.assertEqual([c.role for c in contents], ["user", "model", "user"])
        self.assertEqual(contents[1].parts[0].text, "a1")

    def test_call_embed(self, mock_client_cls):
        client = mock_client_cls.return_value
        embedding = MagicMock()
        embedding.values = [0.1, 0.2]
        client.models.embed_content.return_value = MagicMock(embeddings=[embedding])

        result = gemini.call_embed("text", model="embed-model", api_key="key")

        self.assertEqual(result, [0.1, 0.2])
        client.models.embed_content.assert_called_once_with(
            model="embed-model", contents="text"
        )

    def test_call_embed_empty(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.models.embed_content.return_value = MagicMock(embeddings=[])
        with self.assertRaises(gemini.GeminiInvalidResponseException):
            gemini.call_embed("text", api_key="key")


if __name__ == "__main__":
    unittest.main()
