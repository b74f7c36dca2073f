"""graphflow CLI — Typer-based command-line interface."""

from __future__ import annotations

import asyncio
import sys
import uuid
from pathlib import Path
from typing import Any

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from graphflow import __version__

app = typer.Typer(
    name="graphflow",
    help="graphflow - LangGraph-based multi-agent workflow engine",
    no_args_is_help=True,
)

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"graphflow v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=_version_callback, is_eager=True
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
) -> None:
    """graphflow - LangGraph-based multi-agent workflow engine."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def _read_nodes(path: Path | None) -> list[dict[str, Any]]:
    if path is None:
        return []
    from graphflow.core.config.loader import load_nodes

    try:
        return load_nodes(path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)


# ════════════════════════════════════════════════════════════
# run — execute one workflow request
# ════════════════════════════════════════════════════════════


@app.command()
def run(
    message: str = typer.Argument(help="User request"),
    nodes: Path | None = typer.Option(None, "--nodes", "-n", help="Node declarations (YAML/JSON)"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    session: str = typer.Option("cli:default", "--session", help="Session ID"),
    user: str = typer.Option("cli_user", "--user", help="User ID"),
) -> None:
    """Run the planning workflow for a single request."""
    from langchain_core.messages import HumanMessage

    from graphflow.agent.runner import WorkflowExecutor
    from graphflow.core.config.loader import load_config
    from graphflow.core.providers.litellm import LiteLLMChatModel

    config = load_config(config_path)
    executor = WorkflowExecutor(LiteLLMChatModel(config), config)
    result = asyncio.run(
        executor.execute(
            [HumanMessage(content=message)],
            workflow_id=f"cli-{uuid.uuid4().hex[:8]}",
            session_id=session,
            user_id=user,
            nodes=_read_nodes(nodes),
        )
    )

    console.print(f"\n[bold cyan]graphflow:[/bold cyan] {result.response}\n")

    table = Table(title="Execution")
    table.add_column("Tool", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Error", style="red")
    for entry in result.execution_history:
        table.add_row(entry.step.tool_name, entry.status, entry.error or "-")
    console.print(table)

    structured = result.structured_response
    confidence = f"{structured.confidence}" if structured and structured.confidence is not None else "-"
    console.print(
        f"[dim]tokens: {result.token_usage.input} in / {result.token_usage.output} out · "
        f"cost: {result.model_costs:.4f} · confidence: {confidence}[/dim]"
    )


# ════════════════════════════════════════════════════════════
# chat — interactive conversational loop
# ════════════════════════════════════════════════════════════


@app.command()
def chat(
    personality: str | None = typer.Option(None, "--personality", "-p", help="Personality style"),
    context: str = typer.Option("", "--context", help="Additional context"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
) -> None:
    """Chat with the conversational agent (type 'exit' or 'quit' to leave)."""
    from langchain_core.messages import HumanMessage

    from graphflow.agent.conversational import ConversationalAgent
    from graphflow.agent.state import new_state
    from graphflow.core.config.loader import load_config
    from graphflow.core.providers.litellm import LiteLLMChatModel

    config = load_config(config_path)
    agent = ConversationalAgent(LiteLLMChatModel(config), config)
    state = new_state(
        [],
        session_id="cli:chat",
        user_id="cli_user",
        personality=personality or config.workflow.default_personality,
        context=context,
        max_conversation_turns=config.workflow.max_conversation_turns,
    )

    console.print("[bold]graphflow chat[/bold] (type 'exit' or 'quit' to leave)\n")

    async def _interactive() -> None:
        while agent.should_continue_conversation(state):
            try:
                user_input = console.input("[bold blue]You:[/bold blue] ")
            except (KeyboardInterrupt, EOFError):
                console.print("\nBye!")
                return

            text = user_input.strip()
            if not text:
                continue
            if text.lower() in ("exit", "quit"):
                console.print("Bye!")
                return

            state["messages"].append(HumanMessage(content=text))
            update = await agent.converse(state)
            state["messages"].extend(update.pop("messages"))
            state.update(update)
            console.print(f"\n[bold cyan]graphflow:[/bold cyan] {state['last_response']}\n")

        console.print("[dim]Conversation turn limit reached.[/dim]")

    asyncio.run(_interactive())


# ════════════════════════════════════════════════════════════
# tools — inspect the registry built from a node file
# ════════════════════════════════════════════════════════════


@app.command()
def tools(
    nodes: Path = typer.Option(..., "--nodes", "-n", help="Node declarations (YAML/JSON)"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
) -> None:
    """List the tools a node file produces."""
    from graphflow.agent.tools import create_tools_from_nodes
    from graphflow.core.config.loader import load_config
    from graphflow.core.providers.litellm import LiteLLMChatModel

    config = load_config(config_path)
    registry = create_tools_from_nodes(_read_nodes(nodes), LiteLLMChatModel(config), config)
    if not registry:
        console.print("[dim]No supported nodes found.[/dim]")
        return

    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="blue")
    table.add_column("Description", style="white")
    for tool in registry.values():
        table.add_row(tool.name, tool.type, tool.description)
    console.print(table)


# ════════════════════════════════════════════════════════════
# status — effective configuration
# ════════════════════════════════════════════════════════════


@app.command()
def status(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
) -> None:
    """Show version and effective configuration."""
    from graphflow.core.config.loader import load_config

    config = load_config(config_path)

    table = Table(title="graphflow status")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Version", __version__)
    table.add_row("Model", config.model.name)
    table.add_row("API Key", "set" if config.get_api_key() else "missing")
    table.add_row("Recursion Limit", str(config.workflow.recursion_limit))
    table.add_row("Max Conversation Turns", str(config.workflow.max_conversation_turns))
    table.add_row("Image Endpoint", config.tools.image.endpoint or "(placeholder)")

    console.print(table)
