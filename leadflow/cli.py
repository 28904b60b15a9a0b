"""Command line interface for running leadflow workflows and services."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Optional

import httpx
import typer
from pydantic import SecretStr

from leadflow.config import load_config
from leadflow.errors import ConfigError
from leadflow.workflow import WorkflowOrchestrator

app = typer.Typer(help="CLI for multi-agent automation workflows")


class Service(str, Enum):
    agent = "agent"
    tools = "tools"


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", help="Logging level for leadflow"),
) -> None:
    """leadflow CLI entry point."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("execute")
def execute(
    objective: str,
    server: Optional[str] = typer.Option(None, "--server", "-s", help="Tool server URL"),
    key: Optional[str] = typer.Option(None, "--key", "-k", help="HMAC secret key"),
) -> None:
    """
    Execute a workflow with the given objective.

    Plans the objective into steps, executes each one in order and prints
    the plan followed by one result line per step.

    Example:
        leadflow execute "onboard new customer" --server http://localhost:3000
    """
    config = load_config()
    if server:
        config.agent.tool_server_url = server
    if key:
        config.agent.hmac_secret = SecretStr(key)

    typer.echo(f"Executing objective: {objective}")
    typer.echo(f"Tool server: {config.agent.tool_server_url}")

    try:
        orchestrator = WorkflowOrchestrator.from_config(config)
    except ConfigError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    run = asyncio.run(orchestrator.run(objective))

    typer.echo("\nWorkflow completed!")
    typer.echo("\nPlan:")
    for index, step in enumerate(run.plan.steps, start=1):
        typer.echo(f"  {index}. {step}")

    typer.echo("\nResults:")
    for index, result in enumerate(run.step_results, start=1):
        color = None if result.ok else typer.colors.RED
        typer.secho(f"  {index}. {result.text}", fg=color)


@app.command("health")
def health(
    server: Optional[str] = typer.Option(None, "--server", "-s", help="Tool server URL"),
) -> None:
    """Check health of the tool server."""
    url = (server or load_config().agent.tool_server_url).rstrip("/")
    try:
        response = httpx.get(f"{url}/health", timeout=10)
        response.raise_for_status()
    except httpx.HTTPError as e:
        typer.secho(f"Tool server health check failed: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo(f"Tool server is healthy: {response.json()}")


@app.command("serve")
def serve(
    service: Service,
    host: str = typer.Option("0.0.0.0", help="Interface to bind"),
    port: Optional[int] = typer.Option(None, help="Port to listen on"),
) -> None:
    """Run the agent or tool service with uvicorn."""
    import uvicorn

    from leadflow.server import create_agent_app, create_tool_app

    config = load_config()
    if service is Service.agent:
        application = create_agent_app(config)
        port = port or config.agent.port
    else:
        application = create_tool_app(config)
        port = port or config.tool_server.port

    typer.echo(f"Starting {service.value} service on {host}:{port}")
    uvicorn.run(application, host=host, port=port)


if __name__ == "__main__":
    app()
