"""Tests for inbound / outbound mention rewriting."""

from __future__ import annotations

from botbuilder.schema import Activity, ChannelAccount
from botbuilder.schema import Mention as MentionEntity

from botbridge.messaging.mentions import (
    flatten_outbound,
    parse_inbound,
    rewrite_inbound,
    rewrite_outbound,
)
from botbridge.state.user_directory import UserDirectory

ROSTER = {
    "u1": ChannelAccount(id="u1", name="Alice", aad_object_id="obj1"),
    "u3": ChannelAccount(id="u3", name="Dana"),
}


def _mention(user_id: str, name: str) -> MentionEntity:
    return MentionEntity(
        mentioned=ChannelAccount(id=user_id, name=name),
        text=f"<at>{name}</at>",
        type="mention",
    )


class TestRewriteInbound:
    def test_inline_token_resolves_to_object_id(self) -> None:
        assert rewrite_inbound("<@u1|Alice> hello", None, ROSTER, "b1", "hubot") == "obj1 hello"

    def test_bot_entity_becomes_bot_name(self) -> None:
        text = rewrite_inbound("<at>Hubot</at> ping", [_mention("b1", "Hubot")], ROSTER, "b1", "hubot")
        assert text == "hubot ping"

    def test_entity_on_roster_uses_object_id(self) -> None:
        text = rewrite_inbound("ask <at>Alice</at>", [_mention("u1", "Alice")], ROSTER, "b1", "hubot")
        assert text == "ask obj1"

    def test_entity_off_roster_keeps_display_name(self) -> None:
        text = rewrite_inbound("ask <at>Carol</at>", [_mention("u9", "Carol")], ROSTER, "b1", "hubot")
        assert text == "ask Carol"

    def test_roster_member_without_object_id_keeps_display_name(self) -> None:
        text = rewrite_inbound("<@u3|Dana> hi", None, ROSTER, "b1", "hubot")
        assert text == "Dana hi"

    def test_token_without_display_falls_back_to_id(self) -> None:
        assert rewrite_inbound("<@u9> hi", None, ROSTER, "b1", "hubot") == "u9 hi"

    def test_dict_entities(self) -> None:
        entities = [{"type": "mention", "mentioned": {"id": "u1", "name": "Alice"}, "text": "<at>Alice</at>"}]
        assert rewrite_inbound("<at>Alice</at> hi", entities, ROSTER, "b1", "hubot") == "obj1 hi"

    def test_deserialized_wire_entities(self) -> None:
        activity = Activity().deserialize({
            "type": "message",
            "text": "<at>Alice</at> hi",
            "entities": [
                {"type": "clientInfo", "locale": "en-US"},
                {"type": "mention", "mentioned": {"id": "u1", "name": "Alice"}, "text": "<at>Alice</at>"},
            ],
        })
        assert rewrite_inbound(activity.text, activity.entities, ROSTER, "b1", "hubot") == "obj1 hi"

    def test_non_mention_entities_ignored(self) -> None:
        entities = [{"type": "clientInfo", "locale": "en-US"}]
        assert parse_inbound("plain text", entities, ROSTER, "b1", "hubot") == []

    def test_parse_reports_spans(self) -> None:
        [mention] = parse_inbound("<@u1|Alice> hi", None, ROSTER, "b1", "hubot")
        assert mention.source_id == "u1"
        assert mention.display_text == "Alice"
        assert mention.replacement_text == "obj1"
        assert mention.span == "<@u1|Alice>"


class TestRewriteOutbound:
    def test_known_user_by_id(self, users: UserDirectory) -> None:
        users.user_for_id("u1", name="Alice")
        text, entities = rewrite_outbound("<@u1> hi", users)
        assert text == "<at>Alice</at> hi"
        assert len(entities) == 1
        assert entities[0].mentioned.id == "u1"
        assert entities[0].mentioned.name == "Alice"
        assert entities[0].text == "<at>Alice</at>"

    def test_display_text_wins(self, users: UserDirectory) -> None:
        users.user_for_id("u1", name="Alice")
        text, _ = rewrite_outbound("<@u1|Ally> hi", users)
        assert text == "<at>Ally</at> hi"

    def test_resolves_by_name(self, users: UserDirectory) -> None:
        users.user_for_id("u2", name="Bob")
        text, entities = rewrite_outbound("ping <@bob>", users)
        assert text == "ping <at>Bob</at>"
        assert entities[0].mentioned.id == "u2"

    def test_unresolved_uses_raw_identifier(self, users: UserDirectory) -> None:
        text, entities = rewrite_outbound("<@ghost> boo", users)
        assert text == "<at>ghost</at> boo"
        assert entities[0].mentioned.id == "ghost"
        assert entities[0].mentioned.name == "ghost"

    def test_no_tokens(self, users: UserDirectory) -> None:
        assert rewrite_outbound("nothing here", users) == ("nothing here", [])


class TestFlattenOutbound:
    def test_display_text(self, users: UserDirectory) -> None:
        assert flatten_outbound("<@u1|Alice> done", users) == "Alice done"

    def test_name_from_directory(self, users: UserDirectory) -> None:
        users.user_for_id("u2", name="Bob")
        assert flatten_outbound("ping <@u2>", users) == "ping Bob"

    def test_unresolved_uses_raw_identifier(self, users: UserDirectory) -> None:
        assert flatten_outbound("<@ghost> boo", users) == "ghost boo"


class TestRoundTrip:
    def test_outbound_then_inbound(self, users: UserDirectory) -> None:
        text, entities = rewrite_outbound("<@u1|Alice> hello", users)
        assert text == "<at>Alice</at> hello"
        assert rewrite_inbound(text, entities, ROSTER, "b1", "hubot") == "obj1 hello"

    def test_outbound_then_inbound_without_roster(self, users: UserDirectory) -> None:
        text, entities = rewrite_outbound("<@u1|Alice> hello", users)
        assert rewrite_inbound(text, entities, {}, "b1", "hubot") == "Alice hello"
