from salesbot.config import DEFAULT_CATALOG
from salesbot.models.state import ConversationState
from salesbot.services.prompt_builder import CHAT_TEMPLATES, SALES_INSTRUCTIONS, PromptBuilder


def test_chatml_layout_for_empty_state():
    builder = PromptBuilder(DEFAULT_CATALOG)
    prompt = builder.build(ConversationState(), "I want a small motor for my kayak")

    assert prompt.startswith("<|im_start|>system\n" + SALES_INSTRUCTIONS + "\n\n")
    assert "<|im_end|>\n<|im_start|>user\n/no_think\nI want a small motor for my kayak\n<|im_end|>\n" in prompt
    assert prompt.endswith("<|im_start|>assistant\n")
    assert "- selected_lines: none" in prompt
    assert "- email: none" in prompt
    assert "CURRENT STATE (authoritative; do not ask to confirm):" in prompt


def test_catalog_is_listed_in_order_with_exact_strings():
    builder = PromptBuilder(DEFAULT_CATALOG)
    context = builder.render_context(ConversationState())
    assert "1) RiverLite 2–6hp (portable)" in context
    assert "6) OceanMax 200–300hp (large boats)" in context
    assert context.index("1) RiverLite") < context.index("2) CoastCruiser")


def test_current_state_is_rendered():
    builder = PromptBuilder(DEFAULT_CATALOG)
    state = ConversationState(selected_items=["A", "B"], contact_address="jane@example.com")
    context = builder.render_context(state)
    assert "- selected_lines: A, B" in context
    assert "- email: jane@example.com" in context


def test_instructions_describe_the_five_field_schema():
    for key in ('"reply"', '"selected_lines"', '"ask_email"', '"email"', '"done"'):
        assert key in SALES_INSTRUCTIONS


def test_directive_can_be_disabled():
    builder = PromptBuilder(["Only"], no_think_directive=None)
    prompt = builder.build(ConversationState(), "hello")
    assert "<|im_start|>user\nhello\n<|im_end|>\n" in prompt
    assert "/no_think" not in prompt


def test_other_templates_change_only_the_delimiters():
    builder = PromptBuilder(["Only"], template=CHAT_TEMPLATES["llama3"])
    prompt = builder.build(ConversationState(), "hello")
    assert prompt.startswith("<|begin_of_text|><|start_header_id|>system<|end_header_id|>\n\n")
    assert "<|start_header_id|>user<|end_header_id|>\n\n/no_think\nhello\n<|eot_id|>" in prompt
    assert prompt.endswith("<|start_header_id|>assistant<|end_header_id|>\n\n")
    assert "<|im_start|>" not in prompt


def test_build_is_deterministic():
    builder = PromptBuilder(DEFAULT_CATALOG)
    state = ConversationState(selected_items=["A"])
    assert builder.build(state, "hi") == builder.build(state, "hi")


def test_instructions_do_not_name_a_specific_reasoning_tag():
    assert "<think>" not in SALES_INSTRUCTIONS
    assert "reasoning or thinking blocks" in SALES_INSTRUCTIONS
