"""Command-line entry point: run one agent session or serve the API."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from doc_agent.config import ModelSettings, agent_config_from_env, create_chat_model, load_environment

logger = logging.getLogger("doc_agent")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="doc-agent", description="Document processing agent")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    commands = parser.add_subparsers(dest="command", required=True)

    run = commands.add_parser("run", help="Send one prompt to the agent and print the response")
    run.add_argument("prompt")
    source = run.add_mutually_exclusive_group()
    source.add_argument("--file", dest="file_path", help="Document path to mention in the prompt")
    source.add_argument("--content", help="Inline document content")
    run.add_argument("--base-dir", type=Path, help="Directory the tools start in")
    run.add_argument("--show-trace", action="store_true", help="Print executed tool calls")

    serve = commands.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    return parser


def _run(args: argparse.Namespace) -> int:
    from doc_agent.agent.planner import DocumentAgent, build_prompt
    from doc_agent.obs.tracing import TraceStore

    llm = create_chat_model(ModelSettings.from_env())
    if llm is None:
        logger.error("No chat model configured; set OPENAI_API_KEY")
        return 2

    agent = DocumentAgent(llm=llm, trace_store=TraceStore(), config=agent_config_from_env())
    result = agent.invoke(
        build_prompt(args.prompt, file_path=args.file_path, content=args.content),
        base_dir=args.base_dir,
    )
    print(result.response)
    if args.show_trace:
        for trace in result.tool_traces:
            status = "error" if trace.is_error else "ok"
            print(f"- {trace.name} [{status}] {trace.latency_ms:.1f}ms {trace.input_payload}")
        print(f"tokens: in={result.usage.input_tokens} out={result.usage.output_tokens}")
    return 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("doc_agent.api.main:app", host=args.host, port=args.port, reload=False)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_environment()
    if args.command == "run":
        return _run(args)
    return _serve(args)


if __name__ == "__main__":
    sys.exit(main())
