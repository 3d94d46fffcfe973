#!/usr/bin/env python3
"""Ad hoc runner for the keto recipe generator.

Generate recipes directly without starting the web application.

Usage:
    python query.py "salmon, avocado, spinach"
    python query.py --debug "salmon, avocado"          # Show full JSON recipes
    python query.py --user 42 "chicken, broccoli"       # Flowise session user_42_recipes
    python query.py --prefs prefs.json "eggs, bacon"    # Apply stored dietary preferences
    python query.py --motivation                        # Print today's sensei message

Without FLOWISE_API_URL, FLOWISE_API_KEY and FLOWISE_RECIPE_FLOW_ID the
deterministic mock recipes are returned.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel

from src.cache.recipe_cache import RecipeCache
from src.generator.motivation import daily_motivation
from src.generator.recipe_generator import RecipeGenerator
from src.models.models import Recipe
from src.utils.logger import logger

console = Console()

USAGE = 'Usage: python query.py [--debug] [--user ID] [--prefs FILE] "<ingredients>" | --motivation'


def render_recipe(recipe: Recipe, number: int) -> Panel:
    """Format one recipe as a rich panel."""
    lines = [
        f"[bold]Prep:[/bold] {recipe.prep_time}   [bold]Servings:[/bold] {recipe.servings}   "
        f"[bold]Net carbs:[/bold] {recipe.net_carbs}",
        "",
        "[bold cyan]Ingredients[/bold cyan]",
        *[f"  • {item}" for item in recipe.ingredients],
        "",
        "[bold cyan]Instructions[/bold cyan]",
        *[f"  {step_no}. {step}" for step_no, step in enumerate(recipe.instructions, start=1)],
    ]
    return Panel("\n".join(lines), title=f"{number}. {recipe.title}", border_style="green")


async def _generate(ingredients: str, user_id: str, preferences: Optional[dict]) -> list[Recipe]:
    async with RecipeCache() as cache:
        generator = RecipeGenerator(cache)
        return await generator.generate(ingredients, user_id, preferences)


def run_query(ingredients: str, debug: bool = False, user_id: str = "cli", prefs_path: Optional[str] = None) -> None:
    """Generate recipes for one ingredient list and print them.

    Args:
        ingredients: Comma-separated ingredients.
        debug: If True, print the recipes as JSON.
        user_id: User id for the Flowise session.
        prefs_path: Optional JSON file with stored dietary preferences.
    """
    try:
        preferences = None
        if prefs_path:
            prefs_file = Path(prefs_path)
            if not prefs_file.exists():
                console.print(f"[red]✗ Error: Preferences file not found: {prefs_path}[/red]")
                sys.exit(1)
            preferences = json.loads(prefs_file.read_text(encoding="utf-8"))

        logger.info(f"Generating recipes for: {ingredients}")
        recipes = asyncio.run(_generate(ingredients, user_id, preferences))
        console.print()

        if debug:
            console.print("[bold cyan]Debug Mode: Full Recipes[/bold cyan]")
            console.print_json(data=[recipe.to_dict() for recipe in recipes])
            console.print()

        for number, recipe in enumerate(recipes, start=1):
            console.print(render_recipe(recipe, number))

    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Query execution failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    debug_mode = False
    motivation_mode = False
    user_id = "cli"
    prefs_path = None
    argv_start = 1

    while argv_start < len(sys.argv) and sys.argv[argv_start].startswith("--"):
        flag = sys.argv[argv_start]
        if flag == "--debug":
            debug_mode = True
            argv_start += 1
        elif flag == "--motivation":
            motivation_mode = True
            argv_start += 1
        elif flag in ("--user", "--prefs"):
            argv_start += 1
            if argv_start >= len(sys.argv):
                print(f"Error: {flag} flag requires a value")
                sys.exit(1)
            if flag == "--user":
                user_id = sys.argv[argv_start]
            else:
                prefs_path = sys.argv[argv_start]
            argv_start += 1
        else:
            print(f"Unknown flag: {flag}")
            sys.exit(1)

    if motivation_mode:
        console.print(asyncio.run(daily_motivation(user_id=user_id)))
        sys.exit(0)

    if argv_start >= len(sys.argv):
        print("Error: No ingredients provided")
        print(USAGE)
        sys.exit(1)

    # Join all arguments after flags (handles unquoted lists with spaces)
    run_query(" ".join(sys.argv[argv_start:]), debug=debug_mode, user_id=user_id, prefs_path=prefs_path)
