# qlab/cli/main.py
import importlib
import random
from typing import Optional

import gymnasium as gym
import typer
from gymnasium.error import NameNotFound

import qlab  # noqa: F401  (registra los entornos "qlab/...")
from qlab.cli.run_manager import Q_TABLES_FILE, find_latest_run_dir, get_run_dir
from qlab.cli.utils import console, env_package, get_env_config, parse_int_list, setup_logging
from qlab.core.display import format_q_table, q_table_to_rich
from qlab.core.errors import QLabError
from qlab.core.goals import Goal, goal_key

app = typer.Typer(
    rich_markup_mode="rich",
    help="[bold green]qlab CLI[/bold green]: Q-Learning condicionado a objetivos para el laboratorio.",
    no_args_is_help=True
)


def complete_env_id(incomplete: str):
    """
    Función de autocompletado que devuelve los IDs de entorno que coinciden.
    """
    for env_id in gym.envs.registry.keys():
        if env_id.startswith("qlab/") and env_id.startswith(incomplete):
            yield env_id


def _normalize_env_id(env_id: str) -> str:
    # Aceptar tanto "Lab-v1" como "qlab/Lab-v1"
    normalized = env_id if env_id.startswith("qlab/") else f"qlab/{env_id}"
    try:
        gym.spec(normalized)
    except NameNotFound:
        console.print(
            f"❌ [bold red]Error:[/bold red] Entorno '{env_id}' no encontrado.")
        raise typer.Exit(code=1)
    return normalized


def _parse_goal(raw: Optional[str], config: dict) -> list[int]:
    if raw is None:
        default = config.get("DEFAULT_GOAL")
        if default is None:
            console.print("❌ [bold red]Error:[/bold red] Indica un objetivo con --goal (e.g. 2,3).")
            raise typer.Exit(code=1)
        return list(default)
    try:
        return parse_int_list(raw)
    except ValueError:
        raise typer.BadParameter(f"Objetivo no válido: '{raw}' (e.g. 2,3)")


def _load_agent(env_id: str, config: dict):
    baseline = config.get("BASELINE") or {}
    agent_name = baseline.get("agent")
    if not agent_name:
        console.print(
            f"❌ Error: No hay agente de referencia definido para {env_id}.")
        raise typer.Exit(code=1)
    return importlib.import_module(f"qlab.agents.{env_package(env_id)}.{agent_name}")


def _resolve_run_dir(env_id: str, seed: Optional[int]):
    if seed is not None:
        run_dir = get_run_dir(env_id, seed)
    else:
        console.print(
            "ℹ️ No se especificó semilla. Buscando el último entrenamiento...")
        run_dir = find_latest_run_dir(env_id)

    if not run_dir or not (run_dir / Q_TABLES_FILE).exists():
        console.print(
            "❌ Error: No se encontró un entrenamiento válido. Ejecuta 'qlab train' primero.")
        raise typer.Exit(code=1)
    return run_dir


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Muestra los logs de depuración (cada actualización Q)."),
):
    setup_logging(verbose)


@app.command(name="list")
def list_environments():
    """Lista los entornos registrados."""
    from rich.table import Table

    table = Table("Nombre", "ID (Gymnasium)", "Descripción", "Baseline Agent")
    for env_id in sorted(e for e in gym.envs.registry.keys() if e.startswith("qlab/")):
        config = get_env_config(env_id)
        desc = config.get("DESCRIPTION") or "N/D"
        baseline = (config.get("BASELINE") or {}).get("agent", "[red]N/A[/red]")
        table.add_row(f"[cyan]{env_id.split('/')[-1]}[/cyan]",
                      f"[cyan]{env_id}[/cyan]", desc, baseline)
    console.print(table)


@app.command(name="train")
def train(
    env_id: str = typer.Argument(...,
                                 help="ID del entorno a entrenar (e.g., qlab/Lab-v1).",
                                 autocompletion=complete_env_id),
    goal: Optional[list[str]] = typer.Option(
        None, "--goal", "-g", help="Objetivo, e.g. 2,3. Se puede repetir para entrenar varios."),
    seed: Optional[int] = typer.Option(
        None, "--seed", "-s", help="Semilla para el entrenamiento (si no se da, se genera una)."),
    eps: Optional[int] = typer.Option(
        None, "--eps", "-e", help="Sobrescribir el número de episodios."),
    max_steps: Optional[int] = typer.Option(
        None, "--max-steps", help="Pasos máximos por episodio."),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Tiempo máximo de entrenamiento en segundos."),
    render: bool = typer.Option(
        True, "--progress/--no-progress", help="Mostrar la barra de progreso."),
):
    """Entrena un agente. Si no se especifica una semilla, se genera una aleatoria."""
    env_id = _normalize_env_id(env_id)
    config = get_env_config(env_id)
    agent = _load_agent(env_id, config)
    train_config = (config.get("BASELINE") or {}).get("config", {}).copy()

    if eps is not None:
        train_config['episodes'] = eps
    if max_steps is not None:
        train_config['max_steps'] = max_steps
    if timeout is not None:
        train_config['timeout'] = timeout

    goals = [_parse_goal(g, config) for g in goal] if goal else [_parse_goal(None, config)]

    # LÓGICA DE SEMILLA ALEATORIA ---
    run_seed = seed
    if run_seed is None:
        run_seed = random.randint(0, 10000)
        console.print(
            f"🌱 No se especificó semilla. Usando una aleatoria: [bold yellow]{run_seed}[/bold yellow]")

    run_dir = get_run_dir(env_id, run_seed)
    console.print(
        f"📂 Trabajando en el directorio: [bold yellow]{run_dir}[/bold yellow]")

    try:
        saved = agent.train_agent(env_id, train_config, run_dir=run_dir,
                                  goals=goals, seed=run_seed, render=render)
    except QLabError as e:
        console.print(f"❌ [bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    console.print(f"✅ Q-Tables guardadas en [bold yellow]{saved}[/bold yellow]")


@app.command(name="query")
def query(
    env_id: str = typer.Argument(...,
                                 help="ID del entorno (e.g., qlab/Lab-v1).",
                                 autocompletion=complete_env_id),
    state: str = typer.Option(
        ..., "--state", help="Estado actual, e.g. 2,2,true,false,true,true,2"),
    goal: Optional[str] = typer.Option(
        None, "--goal", "-g", help="Objetivo, e.g. 2,3."),
    seed: Optional[int] = typer.Option(
        None, "--seed", "-s", help="Semilla del 'run' (por defecto, la última)."),
):
    """Muestra la acción recomendada para un estado."""
    env_id = _normalize_env_id(env_id)
    config = get_env_config(env_id)
    agent = _load_agent(env_id, config)
    goal_levels = _parse_goal(goal, config)
    try:
        state_values = parse_int_list(state)
    except ValueError:
        raise typer.BadParameter(f"Estado no válido: '{state}'")

    run_dir = _resolve_run_dir(env_id, seed)
    try:
        action = agent.query_agent(env_id, run_dir, goal_levels, state_values)
    except QLabError as e:
        console.print(f"❌ [bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    console.print(f"[bold cyan]Action:[/bold cyan] {action.action_tag}")
    console.print(f"[bold cyan]Payload tags:[/bold cyan] {list(action.payload_tags)}")
    console.print(f"[bold cyan]Payload:[/bold cyan] {list(action.payload)}")


@app.command(name="show")
def show(
    env_id: str = typer.Argument(...,
                                 help="ID del entorno (e.g., qlab/Lab-v1).",
                                 autocompletion=complete_env_id),
    goal: Optional[str] = typer.Option(
        None, "--goal", "-g", help="Objetivo, e.g. 2,3."),
    seed: Optional[int] = typer.Option(
        None, "--seed", "-s", help="Semilla del 'run' (por defecto, la última)."),
    all_states: bool = typer.Option(
        False, "--all", help="Incluir los estados nunca actualizados."),
    plain: bool = typer.Option(
        False, "--plain", help="Volcado de texto de ancho fijo (todas las filas)."),
):
    """Vuelca la Q-Table de un objetivo."""
    env_id = _normalize_env_id(env_id)
    config = get_env_config(env_id)
    agent = _load_agent(env_id, config)
    goal_levels = _parse_goal(goal, config)
    run_dir = _resolve_run_dir(env_id, seed)

    store = agent.load_store(run_dir)
    try:
        table = store.get(goal_key(goal_levels))
    except QLabError as e:
        console.print(f"❌ [bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)
    if table is None:
        console.print(
            f"❌ [bold red]Error:[/bold red] No hay Q-Table para el objetivo {Goal.of(goal_levels)}.")
        raise typer.Exit(code=1)

    if plain:
        console.print(format_q_table(table), highlight=False, soft_wrap=True)
        return

    labels = agent.action_labels(env_id) if hasattr(agent, "action_labels") else None
    console.print(q_table_to_rich(table, action_labels=labels, only_visited=not all_states,
                                  title=f"Q matrix (objetivo {Goal.of(goal_levels)})"))


@app.command(name="eval")
def evaluate(
    env_id: str = typer.Argument(...,
                                 help="ID del entorno a evaluar (e.g., qlab/Lab-v1).",
                                 autocompletion=complete_env_id),
    goal: Optional[str] = typer.Option(
        None, "--goal", "-g", help="Objetivo, e.g. 2,3."),
    seed: Optional[int] = typer.Option(
        None, "--seed", "-s", help="Semilla del 'run' a evaluar (por defecto, la última)."),
    episodes: int = typer.Option(
        1, "--eps", "-e", help="Número de episodios a ejecutar."),
):
    """Evalúa la política greedy de un objetivo desde el estado inicial."""
    env_id = _normalize_env_id(env_id)
    config = get_env_config(env_id)
    agent = _load_agent(env_id, config)
    goal_levels = _parse_goal(goal, config)
    run_dir = _resolve_run_dir(env_id, seed)
    train_config = (config.get("BASELINE") or {}).get("config", {})

    console.print(f"🎬 Evaluando desde [bold yellow]{run_dir}[/bold yellow]...")
    try:
        result = agent.eval_agent(env_id, run_dir, goal_levels, episodes, train_config)
    except QLabError as e:
        console.print(f"❌ [bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    console.print(
        f"✅ Éxitos: [bold]{result.successes}/{result.episodes}[/bold] "
        f"({result.success_rate:.0%}), pasos medios: {result.mean_steps:.1f}")


@app.command(name="help")
def help_env(
    env_id: str = typer.Argument(...,
                                 help="ID del entorno a inspeccionar (e.g., qlab/Lab-v1).",
                                 autocompletion=complete_env_id),
):
    """Muestra la ficha técnica del entorno."""
    env_id = _normalize_env_id(env_id)
    env = gym.make(env_id)
    try:
        console.print(
            f"\n[bold underline]Ficha Técnica de {env_id}[/bold underline]\n")
        console.print(
            f"[bold cyan]Observation Space:[/bold cyan]\n{env.observation_space}\n")
        console.print(
            f"[bold cyan]Action Space:[/bold cyan]\n{env.action_space}\n")
        unwrapped = env.unwrapped
        if hasattr(unwrapped, "state_count"):
            console.print(
                f"[bold cyan]Estados:[/bold cyan] {unwrapped.state_count()}  "
                f"[bold cyan]Acciones:[/bold cyan] {unwrapped.action_count()}\n")
    finally:
        env.close()


def run_app():
    app()


if __name__ == "__main__":
    run_app()
