"""Click CLI entry point for hypolab."""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING

import click

from hypolab.config import Settings
from hypolab.db import Database
from hypolab.errors import HypolabError, UnmetPreconditionError
from hypolab.logging import configure_logging
from hypolab.models.experiment import ExperimentStatus, ExperimentType
from hypolab.models.hypothesis import HypothesisStage, HypothesisStatus
from hypolab.models.idea import IdeaPriority, IdeaStatus
from hypolab.workflow import HypothesisWorkflow

if TYPE_CHECKING:
    from collections.abc import Iterator

    from hypolab.models.hypothesis import Hypothesis


def _get_db(settings: Settings) -> Database:
    settings.ensure_data_dir()
    db = Database(settings.db_path, busy_timeout_ms=settings.db_busy_timeout_ms)
    db.init_schema()
    return db


@contextmanager
def _workflow(ctx: click.Context) -> Iterator[HypothesisWorkflow]:
    """Open the store for one command; domain errors become exit code 1."""
    settings = ctx.obj["settings"]
    db = _get_db(settings)
    try:
        yield HypothesisWorkflow.from_settings(db, settings)
    except (HypolabError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        if isinstance(exc, UnmetPreconditionError):
            click.echo(f"Missing: {', '.join(exc.missing)}", err=True)
        sys.exit(1)
    finally:
        db.close()


def _choice(enum_cls: type) -> click.Choice:
    return click.Choice([m.value for m in enum_cls], case_sensitive=False)


def _echo_hypothesis(h: Hypothesis) -> None:
    stage = h.stage.value if h.stage else "-"
    click.echo(f"Hypothesis {h.id}: {h.title}")
    click.echo(f"  Status: {h.status.value}")
    click.echo(f"  Level: {h.level.value} (stage: {stage})")
    if h.rice_score is not None:
        click.echo(f"  RICE: {h.rice_score:g}")
    if h.ice_score is not None:
        click.echo(f"  ICE: {h.ice_score:.2f}")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """hypolab: hypothesis validation workflow."""
    ctx.ensure_object(dict)
    settings = Settings()
    log_level = "DEBUG" if verbose else settings.log_level
    configure_logging(log_level=log_level, log_format=settings.log_format)
    ctx.obj["settings"] = settings


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the database schema."""
    settings = ctx.obj["settings"]
    db = _get_db(settings)
    db.close()
    click.echo(f"Database ready at {settings.db_path}")


# --- Ideas ---


@cli.group()
def idea() -> None:
    """Submit, score and select ideas."""


@idea.command("add")
@click.argument("title")
@click.option("--description", default="", help="Idea description")
@click.option("--category", default="", help="Free-form category")
@click.option("--priority", type=_choice(IdeaPriority), default=IdeaPriority.MEDIUM.value)
@click.option("--by", "created_by", default="cli", help="Author")
@click.pass_context
def idea_add(
    ctx: click.Context,
    title: str,
    description: str,
    category: str,
    priority: str,
    created_by: str,
) -> None:
    """Submit a new idea."""
    with _workflow(ctx) as wf:
        created = wf.submit_idea(
            title,
            description=description,
            category=category,
            priority=IdeaPriority(priority.upper()),
            created_by=created_by,
        )
        click.echo(f"Created idea {created.id}: {created.title}")


@idea.command("ls")
@click.option("--status", type=_choice(IdeaStatus), default=None, help="Filter by status")
@click.pass_context
def idea_ls(ctx: click.Context, status: str | None) -> None:
    """List ideas."""
    with _workflow(ctx) as wf:
        ideas = wf.db.list_ideas(IdeaStatus(status.upper()) if status else None)
        if not ideas:
            click.echo("No ideas found.")
            return
        for i in ideas:
            rice = f"{i.rice_score:g}" if i.rice_score is not None else "-"
            ice = f"{i.ice_score:.2f}" if i.ice_score is not None else "-"
            click.echo(f"  [{i.id}] {i.status.value:14s} RICE={rice:>8s} ICE={ice:>5s}  {i.title}")


@idea.command("score")
@click.argument("idea_id", type=int)
@click.option("--reach", type=float, required=True)
@click.option("--impact", type=float, required=True)
@click.option("--confidence", type=float, required=True, help="Percentage, 0-100")
@click.option("--effort", type=float, required=True)
@click.pass_context
def idea_score(
    ctx: click.Context,
    idea_id: int,
    reach: float,
    impact: float,
    confidence: float,
    effort: float,
) -> None:
    """Store RICE inputs for an idea."""
    with _workflow(ctx) as wf:
        scored = wf.score_idea(idea_id, reach, impact, confidence, effort)
        if scored.rice_score is None:
            click.echo(f"Idea {idea_id}: RICE inputs incomplete, no score")
        else:
            click.echo(f"Idea {idea_id}: RICE {scored.rice_score:g} ({scored.status.value})")


@idea.command("ice")
@click.argument("idea_id", type=int)
@click.option("--user", "user_id", required=True, help="Scoring user")
@click.option("--impact", type=click.IntRange(1, 10), required=True)
@click.option("--confidence", type=click.IntRange(1, 10), required=True)
@click.option("--ease", type=click.IntRange(1, 10), required=True)
@click.option("--comment", default="")
@click.pass_context
def idea_ice(
    ctx: click.Context,
    idea_id: int,
    user_id: str,
    impact: int,
    confidence: int,
    ease: int,
    comment: str,
) -> None:
    """Submit (or replace) a user's ICE score for an idea."""
    with _workflow(ctx) as wf:
        _, updated = wf.submit_ice_score(idea_id, user_id, impact, confidence, ease, comment)
        click.echo(f"Idea {idea_id}: ICE {updated.ice_score:.2f} ({updated.status.value})")


@idea.command("select")
@click.argument("idea_id", type=int)
@click.pass_context
def idea_select(ctx: click.Context, idea_id: int) -> None:
    """Select a scored idea for hypothesis work."""
    with _workflow(ctx) as wf:
        selected = wf.select_idea(idea_id)
        click.echo(f"Idea {idea_id}: {selected.status.value}")


# --- Hypotheses ---


@cli.group()
def hypothesis() -> None:
    """Create hypotheses and move them through the workflow."""


@hypothesis.command("add")
@click.argument("idea_id", type=int)
@click.argument("title")
@click.option("--statement", default="", help="If / then / because statement")
@click.option("--description", default="")
@click.option("--by", "created_by", default="cli", help="Author")
@click.pass_context
def hypothesis_add(
    ctx: click.Context,
    idea_id: int,
    title: str,
    statement: str,
    description: str,
    created_by: str,
) -> None:
    """Create a hypothesis for a selected idea."""
    with _workflow(ctx) as wf:
        created = wf.create_hypothesis(
            idea_id,
            title,
            statement=statement,
            description=description,
            created_by=created_by,
        )
        click.echo(f"Created hypothesis {created.id}: {created.title}")


@hypothesis.command("show")
@click.argument("hypothesis_id", type=int)
@click.pass_context
def hypothesis_show(ctx: click.Context, hypothesis_id: int) -> None:
    """Show a hypothesis, its readiness and next possible statuses."""
    with _workflow(ctx) as wf:
        h = wf.get_hypothesis(hypothesis_id)
        facts, options = wf.readiness(hypothesis_id)
        _echo_hypothesis(h)
        click.echo("  Readiness:")
        for name, value in facts.model_dump().items():
            click.echo(f"    {name}: {'yes' if value else 'no'}")
        for c in h.success_criteria:
            actual = f"{c.actual_value:g}" if c.actual_value is not None else "-"
            mark = "x" if c.achieved else " "
            click.echo(f"  [{mark}] {c.name}: {actual} / {c.target_value:g} {c.unit}".rstrip())
        for o in options:
            note = "ok" if o.allowed else "missing " + ", ".join(f.value for f in o.missing)
            click.echo(f"  -> {o.status.value}: {note}")


@hypothesis.command("describe")
@click.argument("hypothesis_id", type=int)
@click.argument("description")
@click.pass_context
def hypothesis_describe(ctx: click.Context, hypothesis_id: int, description: str) -> None:
    """Set or replace a hypothesis description."""
    with _workflow(ctx) as wf:
        wf.update_description(hypothesis_id, description)
        click.echo(f"Hypothesis {hypothesis_id}: description updated")


@hypothesis.command("research")
@click.argument("hypothesis_id", type=int)
@click.option("--notes", required=True, help="Desk research summary")
@click.option("--source", "sources", multiple=True, help="Source (repeatable)")
@click.option("--risk", "risks", multiple=True, help="Risk (repeatable)")
@click.option("--opportunity", "opportunities", multiple=True, help="Opportunity (repeatable)")
@click.pass_context
def hypothesis_research(
    ctx: click.Context,
    hypothesis_id: int,
    notes: str,
    sources: tuple[str, ...],
    risks: tuple[str, ...],
    opportunities: tuple[str, ...],
) -> None:
    """Record desk research for a hypothesis."""
    with _workflow(ctx) as wf:
        wf.submit_desk_research(
            hypothesis_id,
            notes,
            sources=list(sources),
            risks=list(risks),
            opportunities=list(opportunities),
        )
        click.echo(f"Hypothesis {hypothesis_id}: desk research recorded")


@hypothesis.command("score")
@click.argument("hypothesis_id", type=int)
@click.option("--reach", type=float, required=True)
@click.option("--impact", type=float, required=True)
@click.option("--confidence", type=float, required=True, help="Percentage, 0-100")
@click.option("--effort", type=float, required=True)
@click.pass_context
def hypothesis_score(
    ctx: click.Context,
    hypothesis_id: int,
    reach: float,
    impact: float,
    confidence: float,
    effort: float,
) -> None:
    """Store RICE inputs for a hypothesis."""
    with _workflow(ctx) as wf:
        h = wf.submit_rice_score(hypothesis_id, reach, impact, confidence, effort)
        score = f"{h.rice_score:g}" if h.rice_score is not None else "incomplete"
        click.echo(f"Hypothesis {hypothesis_id}: RICE {score}")


@hypothesis.command("criterion")
@click.argument("hypothesis_id", type=int)
@click.argument("name")
@click.argument("target", type=float)
@click.option("--unit", default="")
@click.option("--description", default="")
@click.pass_context
def hypothesis_criterion(
    ctx: click.Context,
    hypothesis_id: int,
    name: str,
    target: float,
    unit: str,
    description: str,
) -> None:
    """Add a success criterion to a hypothesis."""
    with _workflow(ctx) as wf:
        c = wf.add_success_criterion(
            name, target, unit=unit, description=description, hypothesis_id=hypothesis_id
        )
        click.echo(f"Added criterion {c.id}: {c.name} >= {c.target_value:g} {c.unit}".rstrip())


@hypothesis.command("transition")
@click.argument("hypothesis_id", type=int)
@click.argument("target", type=_choice(HypothesisStatus))
@click.option("--actor", default="cli")
@click.pass_context
def hypothesis_transition(ctx: click.Context, hypothesis_id: int, target: str, actor: str) -> None:
    """Request a status transition."""
    with _workflow(ctx) as wf:
        h = wf.request_transition(hypothesis_id, HypothesisStatus(target.upper()), actor)
        click.echo(f"Hypothesis {hypothesis_id}: {h.status.value} ({h.level.value})")


@hypothesis.command("stage")
@click.argument("hypothesis_id", type=int)
@click.argument("target", type=_choice(HypothesisStage))
@click.option("--actor", default="cli")
@click.pass_context
def hypothesis_stage(ctx: click.Context, hypothesis_id: int, target: str, actor: str) -> None:
    """Advance a LEVEL_2 hypothesis to its next stage."""
    with _workflow(ctx) as wf:
        h = wf.request_stage_transition(hypothesis_id, HypothesisStage(target.upper()), actor)
        stage = h.stage.value if h.stage else "-"
        click.echo(f"Hypothesis {hypothesis_id}: stage {stage} ({h.status.value})")


@hypothesis.command("promote")
@click.argument("hypothesis_id", type=int)
@click.option("--actor", default="cli")
@click.pass_context
def hypothesis_promote(ctx: click.Context, hypothesis_id: int, actor: str) -> None:
    """Promote a LEVEL_1 hypothesis to LEVEL_2."""
    with _workflow(ctx) as wf:
        h = wf.promote_to_level_2(hypothesis_id, actor)
        click.echo(f"Hypothesis {hypothesis_id}: {h.level.value}")


@hypothesis.command("history")
@click.argument("hypothesis_id", type=int)
@click.pass_context
def hypothesis_history(ctx: click.Context, hypothesis_id: int) -> None:
    """Show the transition audit trail."""
    with _workflow(ctx) as wf:
        transitions = wf.list_transitions(hypothesis_id)
        if not transitions:
            click.echo("No transitions recorded.")
            return
        for t in transitions:
            click.echo(
                f"  [{t.created_at:%Y-%m-%d %H:%M}] {t.actor}: "
                f"{t.from_status.value} -> {t.to_status.value} ({t.to_level.value})"
            )


# --- Experiments ---


@cli.group()
def experiment() -> None:
    """Run experiments, record results and analyze them."""


@experiment.command("add")
@click.argument("hypothesis_id", type=int)
@click.argument("title")
@click.option("--type", "exp_type", type=_choice(ExperimentType), default="OTHER")
@click.option("--methodology", default="")
@click.option("--by", "created_by", default="cli", help="Author")
@click.pass_context
def experiment_add(
    ctx: click.Context,
    hypothesis_id: int,
    title: str,
    exp_type: str,
    methodology: str,
    created_by: str,
) -> None:
    """Create an experiment for a hypothesis."""
    with _workflow(ctx) as wf:
        created = wf.create_experiment(
            hypothesis_id,
            title,
            type=ExperimentType(exp_type.upper()),
            methodology=methodology,
            created_by=created_by,
        )
        click.echo(f"Created experiment {created.id}: {created.title}")


@experiment.command("status")
@click.argument("experiment_id", type=int)
@click.argument("status", type=_choice(ExperimentStatus))
@click.pass_context
def experiment_status(ctx: click.Context, experiment_id: int, status: str) -> None:
    """Change an experiment's lifecycle status."""
    with _workflow(ctx) as wf:
        updated = wf.change_experiment_status(experiment_id, ExperimentStatus(status.upper()))
        click.echo(f"Experiment {experiment_id}: {updated.status.value}")


@experiment.command("result")
@click.argument("experiment_id", type=int)
@click.argument("metric_name")
@click.argument("value", type=float)
@click.option("--unit", default="")
@click.option("--notes", default="")
@click.pass_context
def experiment_result(
    ctx: click.Context,
    experiment_id: int,
    metric_name: str,
    value: float,
    unit: str,
    notes: str,
) -> None:
    """Record a measured metric."""
    with _workflow(ctx) as wf:
        r = wf.record_result(experiment_id, metric_name, value, unit=unit, notes=notes)
        click.echo(f"Recorded result {r.id}: {r.metric_name} = {r.value:g} {r.unit}".rstrip())


@experiment.command("analyze")
@click.argument("experiment_id", type=int)
@click.option("--json", "as_json", is_flag=True, help="Print the full report as JSON")
@click.pass_context
def experiment_analyze(ctx: click.Context, experiment_id: int, as_json: bool) -> None:
    """Analyze an experiment against its success criteria."""
    with _workflow(ctx) as wf:
        report = wf.analyze_experiment(experiment_id)

    if as_json:
        click.echo(json.dumps(report.model_dump(mode="json"), indent=2))
        return

    verdict = report.hypothesis
    m = report.metrics
    click.echo(f"Experiment {report.experiment.id}: {report.experiment.title}")
    click.echo(
        f"  Success rate: {m.success_rate}% "
        f"({m.achieved_criteria}/{m.total_criteria} criteria, {m.total_results} results)"
    )
    click.echo(f"  Significance: {m.statistical_significance.value}")
    click.echo(
        f"  Recommendation: {verdict.current_status.value} -> {verdict.recommended_status.value}"
    )
    click.echo(f"    {verdict.status_reason}")
    if report.insights:
        click.echo("  Insights:")
        for insight in report.insights:
            click.echo(f"    - {insight.title}: {insight.description}")
    if report.next_steps:
        click.echo("  Next steps:")
        for n, step in enumerate(report.next_steps, 1):
            click.echo(f"    {n}. {step}")


@experiment.command("apply")
@click.argument("experiment_id", type=int)
@click.option("--actor", default="cli")
@click.pass_context
def experiment_apply(ctx: click.Context, experiment_id: int, actor: str) -> None:
    """Apply the analysis recommendation to the hypothesis."""
    with _workflow(ctx) as wf:
        report, h = wf.apply_recommendation(experiment_id, actor)
        if h.status == report.hypothesis.current_status:
            click.echo(f"Hypothesis {h.id}: unchanged ({h.status.value})")
        else:
            click.echo(
                f"Hypothesis {h.id}: {report.hypothesis.current_status.value} -> {h.status.value}"
            )
