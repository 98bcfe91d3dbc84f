"""
Unit Tests for reference token scanning
"""
import time

from standuphub.content.tokens import TokenKind, collect_reference_ids, scan_references

TASK_A = "aaaaaaaa-0000-4000-8000-000000000001"
USER_B = "bbbbbbbb-0000-4000-8000-000000000002"
TASK_C = "cccccccc-0000-4000-8000-000000000003"


class TestTokenKinds:
    """Test each encoding is recognised on its own"""

    def test_hash_task_full_id(self):
        tokens = scan_references(f"Done #TASK-{TASK_A} today")
        assert [(t.kind, t.ref_id) for t in tokens] == [(TokenKind.HASH_TASK, TASK_A)]
        assert tokens[0].raw == f"#TASK-{TASK_A}"

    def test_hash_task_short_id(self):
        tokens = scan_references("Fixed #TASK-99 yesterday")
        assert [(t.kind, t.ref_id) for t in tokens] == [(TokenKind.HASH_TASK, "99")]

    def test_hash_task_does_not_take_trailing_dash(self):
        tokens = scan_references("#TASK-99- done")
        assert tokens[0].ref_id == "99"

    def test_bracket_task_keeps_title(self):
        tokens = scan_references(f"[TASK:{TASK_A}|Ship it]")
        assert tokens[0].kind is TokenKind.BRACKET_TASK
        assert tokens[0].ref_id == TASK_A
        assert tokens[0].title == "Ship it"

    def test_at_mention(self):
        tokens = scan_references(f"thanks @{USER_B}!")
        assert [(t.kind, t.ref_id) for t in tokens] == [(TokenKind.AT_MENTION, USER_B)]

    def test_at_mention_needs_full_id(self):
        assert scan_references("ping @alice and @1234") == []

    def test_leaked_task_span_with_data_id(self):
        text = f'<span class="task-ref" data-id="{TASK_A}">#123: Old title</span>'
        tokens = scan_references(text)
        assert [(t.kind, t.ref_id) for t in tokens] == [(TokenKind.LEAKED_TASK_SPAN, TASK_A)]
        assert tokens[0].end == len(text)

    def test_leaked_task_span_with_data_task_id(self):
        text = f"<span data-task-id='{TASK_A}' class='task-ref'>#1</span>"
        tokens = scan_references(text)
        assert tokens[0].kind is TokenKind.LEAKED_TASK_SPAN

    def test_leaked_user_span_swallows_inner_mention(self):
        """Test a leaked span is one token even when it contains @<id>"""
        text = (
            f'<span class="mention-ref" data-user-id="{USER_B}">'
            f'<img src="a.png" /><span>@{USER_B}</span></span> after'
        )
        tokens = scan_references(text)
        assert [(t.kind, t.ref_id) for t in tokens] == [(TokenKind.LEAKED_USER_SPAN, USER_B)]
        assert text[tokens[0].end:] == " after"

    def test_uppercase_full_ids_are_lowercased(self):
        tokens = scan_references(f"#TASK-{TASK_A.upper()}")
        assert tokens[0].ref_id == TASK_A


class TestScanning:
    """Test scanning mixed content"""

    def test_tokens_are_ordered_by_position(self):
        text = f"@{USER_B} then #TASK-7 then [TASK:{TASK_C}|Docs]"
        tokens = scan_references(text)
        assert [t.kind for t in tokens] == [
            TokenKind.AT_MENTION,
            TokenKind.HASH_TASK,
            TokenKind.BRACKET_TASK,
        ]
        assert [t.start for t in tokens] == sorted(t.start for t in tokens)

    def test_empty_content(self):
        assert scan_references("") == []
        assert scan_references(None) == []

    def test_collect_reference_ids_deduplicates(self):
        text = f"#TASK-{TASK_A} #TASK-{TASK_A} [TASK:{TASK_C}|x] @{USER_B} @{USER_B}"
        task_ids, user_ids = collect_reference_ids(scan_references(text))
        assert task_ids == {TASK_A, TASK_C}
        assert user_ids == {USER_B}

    def test_unclosed_span_is_not_a_token(self):
        text = f'<span data-id="{TASK_A}">#1 and @{USER_B}'
        tokens = scan_references(text)
        assert [(t.kind, t.ref_id) for t in tokens] == [(TokenKind.AT_MENTION, USER_B)]

    def test_deeply_nested_span_is_balanced(self):
        text = f'<span data-id="{TASK_A}"><span><span>x</span></span></span> tail'
        tokens = scan_references(text)
        assert len(tokens) == 1
        assert text[tokens[0].end:] == " tail"

    def test_many_unclosed_spans_scan_quickly(self):
        text = '<span data-id="a"><span>' * 4000
        started = time.perf_counter()
        tokens = scan_references(text)
        elapsed = time.perf_counter() - started

        assert tokens == []
        assert elapsed < 2.0

    def test_many_unclosed_bracket_tags_scan_quickly(self):
        text = "[TASK:" * 20000
        started = time.perf_counter()
        assert scan_references(text) == []
        assert time.perf_counter() - started < 2.0
