from doc_agent.agent.planner import SYSTEM_PROMPT, build_prompt


def test_prompt_forbids_guessing_file_contents() -> None:
    assert "MUST use tools to read actual file contents" in SYSTEM_PROMPT
    assert "FORBIDDEN from making assumptions" in SYSTEM_PROMPT


def test_prompt_requires_extraction_before_analysis() -> None:
    assert "extract_text_content" in SYSTEM_PROMPT


def test_file_path_takes_precedence_over_inline_content() -> None:
    assert build_prompt("Summarize", file_path="a.pdf", content="ignored") == (
        "Summarize (Document: a.pdf)"
    )
    assert build_prompt("Summarize", content="Body text") == (
        "Summarize\n\nDocument content:\nBody text"
    )
    assert build_prompt("Summarize") == "Summarize"
