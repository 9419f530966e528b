"""Tests for the metadata block codec."""

from fit_vault.io.metadata import (
    create_document,
    parse_block,
    parse_metadata_block,
    serialize_block,
    serialize_metadata_block,
)


WORKOUT_METADATA = {
    "name": "Push Day",
    "estimatedDuration": 60,
    "exercises": [
        {
            "exercise": "Bench Press",
            "targetSets": 4,
            "targetRepsMin": 6,
            "targetRepsMax": 8,
            "restSeconds": 180,
        },
        {
            "exercise": "Overhead Press",
            "targetSets": 3,
            "targetRepsMin": 8,
            "targetRepsMax": 10,
            "restSeconds": 120,
        },
    ],
}


class TestParseMetadataBlock:
    def test_scalars_and_inline_array(self):
        metadata, body = parse_metadata_block("---\nname: Push Day\ntags: [upper, push]\n---\nBody text")
        assert metadata == {"name": "Push Day", "tags": ["upper", "push"]}
        assert body == "Body text"

    def test_document_without_fence(self):
        metadata, body = parse_metadata_block("# Just a body\n")
        assert metadata is None
        assert body == "# Just a body\n"

    def test_empty_block(self):
        metadata, body = parse_metadata_block("---\n---\nbody")
        assert metadata == {}
        assert body == "body"

    def test_crlf_line_endings(self):
        metadata, body = parse_metadata_block("---\r\nname: Legs\r\n---\r\nbody\r\n")
        assert metadata == {"name": "Legs"}
        assert body == "body\n"

    def test_block_key_without_children_is_none(self):
        assert parse_block("exercises:\nname: Empty") == {"exercises": None, "name": "Empty"}

    def test_unquoted_link_stays_string(self):
        assert parse_block("workout: [[Push Day]]") == {"workout": "[[Push Day]]"}

    def test_block_style_scalar_array(self):
        assert parse_block("tags:\n  - upper\n  - 3") == {"tags": ["upper", 3]}

    def test_malformed_lines_are_skipped(self):
        assert parse_block("name: A\n???\n: nothing\nsets: 3") == {"name": "A", "sets": 3}


class TestRoundTrip:
    def test_workout_exercises(self):
        text = serialize_metadata_block(WORKOUT_METADATA)
        metadata, _ = parse_metadata_block(text + "\n")
        assert metadata == WORKOUT_METADATA
        assert len(metadata["exercises"]) == 2

    def test_nested_arrays_inside_array_items(self):
        data = {
            "groups": [
                {"sets": [{"weight": 80, "reps": 8}, {"weight": 82.5, "reps": 6}], "name": "Heavy"},
                {"name": "Light", "sets": [{"weight": 60, "reps": 12}]},
            ],
            "after": "still top level",
        }
        assert parse_block(serialize_block(data)) == data

    def test_nested_objects(self):
        data = {
            "motivation": {"style": "calm", "text": "Steady progress."},
            "items": [{"name": "A", "meta": {"x": 1, "y": "two"}, "tail": True}],
        }
        assert parse_block(serialize_block(data)) == data

    def test_strings_that_look_like_other_types(self):
        data = {"code": "42", "flag": "true", "empty": "", "link": "[[Push Day]]", "time": "10:30"}
        assert parse_block(serialize_block(data)) == data

    def test_none_and_empty_values_are_omitted(self):
        assert serialize_block({"a": None, "b": [], "c": {}, "d": 1}) == "d: 1"


class TestCreateDocument:
    def test_with_body(self):
        assert create_document({"name": "Legs"}, "\n## Exercises\n") == "---\nname: Legs\n---\n\n## Exercises\n"

    def test_without_body(self):
        assert create_document({"name": "Legs"}) == "---\nname: Legs\n---\n"
