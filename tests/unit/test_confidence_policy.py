"""
Confidence Policy Tests
"""

import pytest

from gateway import HEDGING_PHRASE, is_low_confidence
from inference import CompletionResponse


class TestIsLowConfidence:

    def test_plain_answer_is_confident(self):
        assert is_low_confidence(CompletionResponse(status="success", output="It's 4")) is False

    def test_hedging_phrase_is_low_confidence(self):
        response = CompletionResponse(status="success", output="I don't know the answer")
        assert is_low_confidence(response) is True

    def test_hedging_phrase_anywhere_in_text(self):
        response = CompletionResponse(status="success", output=f"Honestly, {HEDGING_PHRASE}.")
        assert is_low_confidence(response) is True

    def test_check_is_case_sensitive_substring(self):
        response = CompletionResponse(status="success", output="i don't know")
        assert is_low_confidence(response) is False

    @pytest.mark.parametrize("status", ["recoverable_error", "fatal_error"])
    def test_backend_failure_is_low_confidence(self, status):
        assert is_low_confidence(CompletionResponse(status=status)) is True

    def test_missing_response_is_low_confidence(self):
        assert is_low_confidence(None) is True

    def test_empty_output_is_low_confidence(self):
        assert is_low_confidence(CompletionResponse(status="success", output="")) is True
