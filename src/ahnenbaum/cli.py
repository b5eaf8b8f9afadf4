"""CLI interface for the Ahnenbaum relationship graph engine."""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(
    name="ahnenbaum",
    help="Genealogical relationship graph: edges, kinship and layouts",
    add_completion=False,
)
console = Console()

DB_OPTION = typer.Option(None, "--db", help="SQLite database (default: AHNENBAUM_DB_PATH)")


def get_config():
    """Load configuration from environment (.env first)."""
    from dotenv import load_dotenv

    load_dotenv()

    from .config import CONFIG

    return CONFIG


def get_engine(db: Path | None):
    """Open an engine over the SQLite database."""
    from .engine import GenealogyEngine
    from .storage.sqlite import SQLiteStore

    config = get_config()
    db_path = db or Path(config.db_path)
    return GenealogyEngine(SQLiteStore(db_path), config)


def _unwrap(result):
    """Return result data, or print the error and exit 1."""
    if not result.ok:
        console.print(f"[red]Error ({result.error.code.value}): {result.error.message}[/red]")
        raise typer.Exit(1)
    return result.data


def _names(engine, person_ids) -> dict:
    from .services.extended_family import resolve_persons

    resolved = resolve_persons(engine.store, person_ids)
    return {pid: p.display_name for pid, p in resolved.items()}


@app.command("person-add")
def person_add(
    given: str = typer.Argument(..., help="Given name(s)"),
    surname: str = typer.Argument("", help="Surname"),
    sex: str = typer.Option("unknown", "--sex", "-s", help="male, female, intersex or unknown"),
    db: Path = DB_OPTION,
):
    """Add a person with a preferred birth name."""
    from .models.person import Person, PersonName, Sex

    try:
        sex_value = Sex(sex.lower())
    except ValueError:
        console.print(f"[red]Invalid sex. Choose from: {[s.value for s in Sex]}[/red]")
        raise typer.Exit(1)

    engine = get_engine(db)
    person = engine.store.add_person(Person(sex=sex_value))
    engine.store.add_name(PersonName(person_id=person.id, given=given, surname=surname))
    console.print(f"[green]Added {' '.join(p for p in (given, surname) if p)}[/green]")
    console.print(person.id)


@app.command()
def relate(
    person_a: str = typer.Argument(..., help="Parent (parent-child types) or first partner"),
    person_b: str = typer.Argument(..., help="Child (parent-child types) or second partner"),
    rel_type: str = typer.Argument(..., metavar="TYPE", help="Relationship type, e.g. biological_parent"),
    notes: str = typer.Option(None, "--notes", "-n", help="Free-text notes"),
    db: Path = DB_OPTION,
):
    """Create a relationship edge (co-parents are partnered automatically)."""
    engine = get_engine(db)
    payload = {"person_a_id": person_a, "person_b_id": person_b, "type": rel_type}
    if notes:
        payload["notes"] = notes

    created = _unwrap(engine.create_relationship(payload))
    rel = created.relationship
    console.print(f"[green]Created {rel.type.value}[/green] {rel.id}")
    for partner in created.auto_partnerships:
        console.print(
            f"[cyan]Auto-created {partner.type.value}[/cyan] "
            f"{partner.person_a_id} <-> {partner.person_b_id} ({partner.id})"
        )


@app.command()
def unrelate(
    rel_id: str = typer.Argument(..., help="Relationship ID"),
    db: Path = DB_OPTION,
):
    """Soft-delete a relationship edge."""
    engine = get_engine(db)
    _unwrap(engine.delete_relationship(rel_id))
    console.print(f"[green]Deleted {rel_id}[/green]")


@app.command()
def relationships(
    person_id: str = typer.Argument(None, help="Only edges touching this person"),
    page: int = typer.Option(1, "--page", "-p", help="Page number"),
    limit: int = typer.Option(None, "--limit", "-l", help="Page size (default: AHNENBAUM_LIST_DEFAULT_LIMIT)"),
    db: Path = DB_OPTION,
):
    """List relationships, paged or for one person."""
    engine = get_engine(db)

    if person_id:
        grouped = _unwrap(engine.get_relationships_for_person(person_id))
        rows = [rel for rels in grouped.values() for rel in rels]
        footer = f"{len(rows)} relationships"
    else:
        listing = _unwrap(engine.list_relationships(page=page, limit=limit))
        rows = listing.relationships
        footer = f"Page {listing.page}, showing {len(rows)} of {listing.total}"

    names = _names(engine, [pid for r in rows for pid in (r.person_a_id, r.person_b_id)])

    table = Table(title="Relationships")
    table.add_column("ID", style="dim")
    table.add_column("Person A")
    table.add_column("Type")
    table.add_column("Person B")
    for rel in rows:
        table.add_row(
            rel.id,
            names.get(rel.person_a_id, rel.person_a_id),
            rel.type.value,
            names.get(rel.person_b_id, rel.person_b_id),
        )

    console.print(table)
    console.print(f"[dim]{footer}[/dim]")


@app.command()
def siblings(
    person_id: str = typer.Argument(..., help="Person ID"),
    db: Path = DB_OPTION,
):
    """List siblings (including half-siblings) of a person."""
    engine = get_engine(db)
    sibling_ids = _unwrap(engine.get_siblings(person_id))

    if not sibling_ids:
        console.print("[yellow]No siblings found[/yellow]")
        return

    names = _names(engine, sibling_ids)
    for sibling_id in sibling_ids:
        console.print(f"  • {names.get(sibling_id, sibling_id)} [dim]{sibling_id}[/dim]")


@app.command()
def extended(
    person_id: str = typer.Argument(..., help="Person ID"),
    db: Path = DB_OPTION,
):
    """Show derived extended family (grandparents, cousins, in-laws, ...)."""
    engine = get_engine(db)
    family = _unwrap(engine.get_extended_family(person_id))

    table = Table(title="Extended Family")
    table.add_column("Relationship")
    table.add_column("Person")
    table.add_column("ID", style="dim")
    for bucket in family.to_dict():
        for member in getattr(family, bucket):
            table.add_row(
                member.derived_relationship.value.replace("_", " "),
                member.person.display_name,
                member.person.id,
            )

    console.print(table)
    console.print(f"[dim]{family.total} relatives[/dim]")


@app.command()
def tree(
    root_id: str = typer.Argument(..., help="Root person ID"),
    generations: int = typer.Option(
        None, "--generations", "-g", help="Generations, root included (default: AHNENBAUM_TREE_GENERATIONS)"
    ),
    db: Path = DB_OPTION,
):
    """Lay out the ancestor pedigree of a person."""
    engine = get_engine(db)
    root = _unwrap(engine.build_ancestor_tree(root_id, generations))
    if root is None:
        console.print(f"[red]Error (NOT_FOUND): Person '{root_id}' not found[/red]")
        raise typer.Exit(1)

    nodes = _unwrap(engine.layout_ancestor_tree(root))
    bounds = _unwrap(engine.get_tree_bounds(nodes))

    table = Table(title=f"Pedigree of {root.person.display_name}")
    table.add_column("Generation", justify="right")
    table.add_column("Person")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    for node in nodes:
        table.add_row(str(node.generation), node.person.display_name, f"{node.x:g}", f"{node.y:g}")

    console.print(table)
    console.print(f"[dim]{len(nodes)} ancestors, {bounds.width:g} x {bounds.height:g}[/dim]")


@app.command("layout-family")
def layout_family(
    output: Path = typer.Option(None, "--output", "-o", help="Write the layout as JSON"),
    db: Path = DB_OPTION,
):
    """Lay out the whole family graph by generation."""
    engine = get_engine(db)
    snapshot = _unwrap(engine.get_full_family_tree())
    layout = _unwrap(engine.layout_family_graph(snapshot.persons, snapshot.relationships))

    if output:
        data = {
            "nodes": [n.to_dict() for n in layout.nodes],
            "connections": [c.to_dict() for c in layout.connections],
        }
        output.write_text(json.dumps(data, indent=2))
        console.print(f"[green]Layout saved to {output}[/green]")
        return

    table = Table(title="Family Graph")
    table.add_column("Generation", justify="right")
    table.add_column("Person")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    for node in layout.nodes:
        table.add_row(str(node.generation), node.person.display_name, f"{node.x:g}", f"{node.y:g}")

    console.print(table)
    console.print(Panel(
        f"{len(layout.nodes)} persons, {len(layout.connections)} connectors",
        title="Layout",
    ))


if __name__ == "__main__":
    app()
