#!/usr/bin/env python3
"""
Tests for prompt assembly.
"""

import pytest
from pydantic import ValidationError

from ester.prompt import (
    HEALTH_DATA_LABEL,
    ChatMessage,
    build_input,
    has_health_data,
)


class TestChatMessage:
    """Test the conversation message model."""

    def test_camel_case_alias(self):
        """Test the browser-style isAI key is accepted."""
        message = ChatMessage.model_validate({"content": "Hi there", "isAI": True})
        assert message.is_ai
        assert message.speaker == "Assistant"

    def test_defaults_to_user(self):
        """Test messages are user turns unless marked otherwise."""
        message = ChatMessage(content="Hello")
        assert not message.is_ai
        assert message.speaker == "User"

    def test_content_required(self):
        """Test a message without content is rejected."""
        with pytest.raises(ValidationError):
            ChatMessage.model_validate({"isAI": False})


class TestBuildInput:
    """Test the single input string sent to the model."""

    def test_full_prompt(self):
        """Test prefix, system prompt, health data and transcript order."""
        prompt = build_input(
            [
                ChatMessage(content="I slept badly"),
                ChatMessage(content="I'm sorry to hear that.", is_ai=True),
            ],
            system_prompt="SYSTEM",
            health_data={"recovery": 34, "note": "café"},
            system_prompt_prefix="PREFIX",
        )

        assert prompt == (
            "PREFIX\n"
            "SYSTEM\n"
            f'{HEALTH_DATA_LABEL}{{"recovery":34,"note":"café"}}\n'
            "User: I slept badly\n"
            "Assistant: I'm sorry to hear that.\n"
        )

    def test_minimal_prompt(self):
        """Test an empty prefix and missing health data are omitted."""
        prompt = build_input([{"content": "Hi"}], system_prompt="SYSTEM")
        assert prompt == "SYSTEM\nUser: Hi\n"

    def test_empty_health_data_is_still_included(self):
        """Test present-but-empty health data is rendered."""
        prompt = build_input([], system_prompt="SYSTEM", health_data={})
        assert prompt == f"SYSTEM\n{HEALTH_DATA_LABEL}{{}}\n"

    def test_multiline_content_is_kept_verbatim(self):
        """Test message content is not reformatted."""
        prompt = build_input(
            [ChatMessage(content="line one\nline two")], system_prompt="S"
        )
        assert prompt == "S\nUser: line one\nline two\n"

    @pytest.mark.parametrize("health_data", [None, False, 0, 0.0, "", float("nan")])
    def test_falsy_health_data_is_omitted(self, health_data):
        """Test falsy scalar health data leaves no health data line."""
        prompt = build_input([], system_prompt="SYSTEM", health_data=health_data)
        assert prompt == "SYSTEM\n"

    @pytest.mark.parametrize(
        ("health_data", "rendered"),
        [([], "[]"), ("ok", '"ok"'), (7, "7"), (True, "true")],
    )
    def test_truthy_health_data_is_rendered(self, health_data, rendered):
        """Test empty arrays and truthy scalars are rendered."""
        prompt = build_input([], system_prompt="SYSTEM", health_data=health_data)
        assert prompt == f"SYSTEM\n{HEALTH_DATA_LABEL}{rendered}\n"


def test_has_health_data_treats_containers_as_present():
    """Test containers count as present even when empty."""
    assert has_health_data({})
    assert has_health_data([])
    assert not has_health_data(None)
    assert not has_health_data(False)
