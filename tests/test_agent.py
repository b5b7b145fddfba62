import asyncio
import re

import pytest

from agent.coding_agent import SYSTEM_PROMPT, run_coding_agent
from fakes import FakeProvisioner, ScriptedLLM, answer_turn, last_tool_result, tool_turn

REPO_URL = "https://github.com/octo/demo"


def run(llm, provisioner, github_token=None, events=None, **options):
    on_progress = None
    if events is not None:
        def on_progress(message, kind):
            events.append((message, kind))

    return asyncio.run(
        run_coding_agent(
            "list files in the repo",
            REPO_URL,
            github_token,
            on_progress,
            llm=llm,
            provisioner=provisioner,
            **options,
        )
    )


def test_list_files_end_to_end(sandbox):
    provisioner = FakeProvisioner(sandbox)
    events = []

    def summarize(messages):
        listing = last_tool_result(messages)["output"]
        assert "README.md" in listing
        return answer_turn("The repo has a README.md and a package.json.")

    llm = ScriptedLLM([tool_turn(("list_files", {"path": None})), summarize])

    result = run(llm, provisioner, events=events)

    assert result.response == "The repo has a README.md and a package.json."
    assert result.steps == 2
    assert result.tool_calls == 1
    assert provisioner.calls == [(REPO_URL, None)]
    assert sandbox.stop_calls == 1
    assert events == [
        ("Starting analysis of the repository...", "thinking"),
        ("Setting up development environment...", "thinking"),
        ("Listing files in: root directory", "thinking"),
        ("Cleaning up environment...", "thinking"),
        ("Analysis complete!", "result"),
        ("The repo has a README.md and a package.json.", "complete"),
    ]


def test_conversation_starts_with_system_prompt(sandbox):
    llm = ScriptedLLM([answer_turn("Nothing to do.")])

    run(llm, FakeProvisioner(sandbox))

    first = llm.calls[0]
    assert first[0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert first[1] == {"role": "user", "content": "list files in the repo"}
    assert [tool.name for tool in llm.tools[0]] == [
        "read_file",
        "list_files",
        "edit_file",
        "create_pr",
        "create_issue",
    ]


def test_answer_without_tools_never_provisions(sandbox):
    provisioner = FakeProvisioner(sandbox)

    result = run(ScriptedLLM([answer_turn("Hello!")]), provisioner)

    assert result.response == "Hello!"
    assert provisioner.calls == []
    assert sandbox.stop_calls == 0


def test_edit_then_pull_request_reuses_one_sandbox(github_sandbox):
    provisioner = FakeProvisioner(github_sandbox)
    pr_results = []

    def finish(messages):
        pr_results.append(last_tool_result(messages))
        return answer_turn("Opened a pull request.")

    llm = ScriptedLLM(
        [
            tool_turn(
                (
                    "edit_file",
                    {"path": "README.md", "old_str": "Hello world.", "new_str": "Hello agents."},
                )
            ),
            tool_turn(("create_pr", {"title": "Update README", "body": "Friendlier greeting"})),
            finish,
        ]
    )

    result = run(llm, provisioner, github_token="ghp_secret", agent_host="agent.dev")

    assert result.response == "Opened a pull request."
    assert len(provisioner.calls) == 1
    assert github_sandbox.stop_calls == 1

    message, files = github_sandbox.commits[0]
    assert files == ["README.md"]
    assert message.startswith("Update README")
    assert github_sandbox.files["README.md"] == "# Demo\n\nHello agents.\n"

    pr = pr_results[0]
    assert pr["success"] is True
    assert re.fullmatch(r"https://github\.com/octo/demo/pull/\d+", pr["pr_url"])


def test_tool_errors_are_returned_to_the_model(sandbox):
    results = []

    def inspect(messages):
        results.append(last_tool_result(messages))
        return answer_turn("That file does not exist.")

    llm = ScriptedLLM([tool_turn(("read_file", {"path": "missing.ts"})), inspect])

    result = run(llm, FakeProvisioner(sandbox))

    assert result.response == "That file does not exist."
    assert "No such file" in results[0]["error"]


def test_step_ceiling(sandbox):
    llm = ScriptedLLM([tool_turn(("list_files", {})) for _ in range(5)])

    result = run(llm, FakeProvisioner(sandbox), max_steps=3)

    assert result.steps == 3
    assert result.tool_calls == 3
    assert len(llm.steps) == 2
    assert sandbox.stop_calls == 1


def test_multiple_tool_calls_in_one_step(sandbox):
    llm = ScriptedLLM(
        [
            tool_turn(("read_file", {"path": "README.md"}), ("read_file", {"path": "package.json"})),
            answer_turn("Read both."),
        ]
    )

    result = run(llm, FakeProvisioner(sandbox))

    assert result.tool_calls == 2
    tool_messages = [m for m in llm.calls[1] if m["role"] == "tool"]
    assert [m["tool_call_id"] for m in tool_messages] == ["call_0", "call_1"]


def test_sandbox_stopped_when_model_fails(sandbox):
    def crash(messages):
        raise RuntimeError("model unavailable")

    llm = ScriptedLLM([tool_turn(("list_files", {})), crash])

    with pytest.raises(RuntimeError, match="model unavailable"):
        run(llm, FakeProvisioner(sandbox))

    assert sandbox.stop_calls == 1


def test_broken_progress_callback_does_not_stop_the_run(sandbox):
    def on_progress(message, kind):
        raise ValueError("listener gone")

    llm = ScriptedLLM([tool_turn(("list_files", {})), answer_turn("Done.")])

    result = asyncio.run(
        run_coding_agent(
            "list files",
            REPO_URL,
            None,
            on_progress,
            llm=llm,
            provisioner=FakeProvisioner(sandbox),
        )
    )

    assert result.response == "Done."


def test_simulated_flaky_tools_fail_once(sandbox):
    results = []

    def record(messages):
        results.append(last_tool_result(messages))
        if len(results) == 1:
            return tool_turn(("read_file", {"path": "README.md"}))
        return answer_turn("Read it on the retry.")

    llm = ScriptedLLM([tool_turn(("read_file", {"path": "README.md"})), record, record])

    result = run(llm, FakeProvisioner(sandbox), simulate_flaky=True)

    assert result.response == "Read it on the retry."
    assert "Simulated transient failure" in results[0]["error"]
    assert results[1]["content"].startswith("# Demo")
