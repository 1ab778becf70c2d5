# Copyright 2026 castline.fm
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import click
import uvicorn

# This module can be executed in two ways:
# 1. Package mode (recommended): `castline` command (pyproject.toml entry point)
# 2. Module mode (development): `python -m castline.cli`
from .logging import configure_structlog
from .models.user import UserRole
from .utils.config import load_config
from .utils.exceptions import CastlineError
from .web.app import create_app
from .web.dependencies import build_app_state


@click.group()
@click.option("--config", "-c", help="Path to .env file")
@click.pass_context
def main(ctx, config):
    """castline - podcast and social audio API"""
    configure_structlog()

    try:
        config_obj = load_config(config)
    except (ValueError, OSError) as e:
        click.echo(f"❌ Configuration error: {e}", err=True)
        ctx.exit(1)

    # Services are built once and shared by every command
    ctx.obj = build_app_state(config_obj)


@main.command()
@click.option("--host", "-h", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
@click.option("--port", "-p", default=8000, type=int, help="Port to bind to (default: 8000)")
@click.pass_context
def server(ctx, host, port):
    """Start the API server.

    Examples:
        castline server                      # Start on localhost:8000
        castline server --port 8080          # Custom port
        castline server --host 0.0.0.0       # Bind to all interfaces
    """
    state = ctx.obj

    click.echo("🌐 Starting castline API server...")
    click.echo(f"   Host: {host}")
    click.echo(f"   Port: {port}")
    click.echo(f"   Database: {state.config.database_path}")
    click.echo(f"📚 API Docs: http://{host}:{port}/docs")
    click.echo("")

    uvicorn.run(create_app(app_state=state), host=host, port=port, log_level="info")


@main.command("create-user")
@click.argument("email")
@click.option("--name", "-n", help="Display name")
@click.option("--admin", is_flag=True, help="Grant the admin role")
@click.pass_context
def create_user(ctx, email, name, admin):
    """Create an account and print an access token for it.

    Signup and login are handled by the login service; use this to bootstrap
    the first admin or service accounts.
    """
    state = ctx.obj
    role = UserRole.ADMIN if admin else UserRole.USER

    try:
        user = state.user_service.create_user(email=email, name=name, role=role)
    except CastlineError as e:
        click.echo(f"❌ {e.message}", err=True)
        ctx.exit(1)

    click.echo(f"✓ Created {role.value} {user.email} ({user.id})")
    click.echo(state.auth_service.create_jwt(user))


@main.command("create-category")
@click.argument("name")
@click.pass_context
def create_category(ctx, name):
    """Create a podcast category."""
    try:
        category = ctx.obj.category_service.create_category(name)
    except CastlineError as e:
        click.echo(f"❌ {e.message}", err=True)
        ctx.exit(1)

    click.echo(f"✓ Created category: {category.name}")


if __name__ == "__main__":
    main()
