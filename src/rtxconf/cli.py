"""rtxconf CLI: Click-based command-line interface.

Commands:
  parse       Parse a config file and summarize it
  scopes      Show the scope tree of a config file
  commands    List scope-tagged commands
  extract     Run resource extractors and export the records
  extractors  List registered extractors
  scan        Parse every config file in a directory
  demo        Run a demo on a sample configuration
"""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path

import click

from rtxconf import __version__
from rtxconf.errors import RtxConfError

SCOPE_COLORS = {"global": "white", "pp": "cyan", "tunnel": "magenta", "ipsec_tunnel": "yellow"}


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


@click.group()
@click.version_option(version=__version__, prog_name="rtxconf")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-s", "--settings", "settings_path", type=click.Path(exists=True),
              help="YAML settings file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, settings_path: str | None) -> None:
    """rtxconf: context-aware RTX router configuration parser.

    Tags every command with its pp/tunnel scope and extracts routes,
    DHCP, NAT, filters, credentials, tunnels and DNS settings.
    """
    from rtxconf.sanitize import install_sanitizer
    from rtxconf.settings import ParserSettings, load_settings

    _setup_logging(verbose)
    try:
        settings = load_settings(settings_path) if settings_path else ParserSettings()
    except RtxConfError as e:
        raise click.ClickException(str(e)) from e
    if settings.redact_secrets:
        install_sanitizer()
    ctx.obj = settings


def _parse(ctx: click.Context, filepath: str):
    from rtxconf.ingest.parser import ConfigParser

    return ConfigParser(ctx.obj).parse_file(filepath)


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def parse(ctx: click.Context, filepath: str) -> None:
    """Parse a config file and show a summary."""
    config = _parse(ctx, filepath)
    stream = config.stream

    click.echo(f"Device:   {config.device_name}")
    click.echo(f"Lines:    {stream.line_count}")
    click.echo(f"Commands: {stream.command_count}")
    click.echo(f"Scopes:   {len(stream.scopes)}")
    by_kind = Counter(cmd.scope.kind.value for cmd in stream)
    for kind, count in sorted(by_kind.items()):
        click.echo(click.style(f"  {kind:14s}", fg=SCOPE_COLORS.get(kind, "white"))
                   + f"{count} commands")


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def scopes(ctx: click.Context, filepath: str) -> None:
    """Show every scope opened in a config file."""
    config = _parse(ctx, filepath)
    stream = config.stream

    if not stream.scopes:
        click.echo("No scopes: every command is global.")
        return

    for scope in stream.scopes:
        indent = "    " if scope.parent is not None else "  "
        count = len(stream.in_instance(scope))
        click.echo(
            indent
            + click.style(f"{scope.label:22s}", fg=SCOPE_COLORS.get(scope.kind.value, "white"))
            + f" line {scope.line_number:<6d} {count} commands"
        )


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@click.option("--scope", "scope_label", help="Only commands in this scope, e.g. tunnel:1")
@click.option("--global-only", is_flag=True, help="Only commands outside any scope")
@click.option("--csv", "csv_path", type=click.Path(), help="Write the command stream as CSV")
@click.pass_context
def commands(ctx: click.Context, filepath: str, scope_label: str | None,
             global_only: bool, csv_path: str | None) -> None:
    """List scope-tagged commands."""
    from rtxconf.models import Scope
    from rtxconf.report.generator import RecordExporter
    from rtxconf.sanitize import sanitize_line

    if scope_label and global_only:
        raise click.UsageError("--scope and --global-only are mutually exclusive")

    config = _parse(ctx, filepath)
    stream = config.stream

    if scope_label:
        try:
            selected = stream.in_scope(Scope.from_label(scope_label))
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--scope") from e
    elif global_only:
        selected = stream.global_commands()
    else:
        selected = list(stream)

    redact = ctx.obj.redact_secrets
    for cmd in selected:
        text = sanitize_line(cmd.text) if redact else cmd.text
        click.echo(
            f"{cmd.number:5d} "
            + click.style(f"[{cmd.scope.label}]", fg=SCOPE_COLORS.get(cmd.scope.kind.value, "white"))
            + f" {text}"
        )

    if csv_path:
        RecordExporter(redact_secrets=redact).generate_csv(stream, csv_path)
        click.echo(f"\nCSV saved: {csv_path}")


@cli.command()
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
@click.option("-e", "--extractor", "names", multiple=True, help="Extractor to run (repeatable)")
@click.option("--format", "fmt", type=click.Choice(["json", "yaml", "text"]),
              default="json", help="Output format")
@click.option("-o", "--output", type=click.Path(), help="Output file")
@click.option("-w", "--workers", type=click.IntRange(min=1), help="Extractor threads")
@click.pass_context
def extract(ctx: click.Context, filepath: str, names: tuple[str], fmt: str,
            output: str | None, workers: int | None) -> None:
    """Run resource extractors and export the records."""
    from rtxconf.extract.registry import extract_all
    from rtxconf.report.generator import RecordExporter

    settings = ctx.obj
    config = _parse(ctx, filepath)
    try:
        records = extract_all(config.stream, list(names) or settings.extractors or None,
                              workers=workers or settings.workers)
    except RtxConfError as e:
        raise click.ClickException(str(e)) from e

    exporter = RecordExporter(redact_secrets=settings.redact_secrets)
    if fmt == "yaml":
        data = exporter.generate_yaml(config, records, output)
    elif fmt == "text":
        data = exporter.generate_text(config, records, output)
    else:
        data = exporter.generate_json(config, records, output)

    if output:
        click.echo(f"Export saved: {output}")
    else:
        click.echo(data)


@cli.command()
def extractors() -> None:
    """List registered extractors."""
    from rtxconf.extract.registry import EXTRACTORS

    click.echo(f"Registered extractors: {len(EXTRACTORS)}")
    click.echo()
    for name, extractor in EXTRACTORS.items():
        click.echo(f"  {name:20s} {extractor.description}")


@cli.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--no-recursive", is_flag=True, help="Do not descend into subdirectories")
@click.pass_context
def scan(ctx: click.Context, directory: str, no_recursive: bool) -> None:
    """Parse every config file found in a directory."""
    from rtxconf.ingest.parser import ConfigParser
    from rtxconf.ingest.scanner import DirectoryScanner

    scanner = DirectoryScanner(ConfigParser(ctx.obj))
    configs = scanner.scan(directory, recursive=not no_recursive)

    click.echo(f"Scanning directory: {Path(directory)}")
    click.echo(f"Configs found: {len(configs)}")
    for config in configs:
        stream = config.stream
        click.echo(f"  {config.device_name:24s} {stream.command_count:5d} commands "
                   f"{len(stream.scopes):3d} scopes")


DEMO_CONFIG = """\
# RTX demo configuration
login password encrypted ZXhhbXBsZQ
administrator password encrypted ZXhhbXBsZQ
ip route default gateway pp 1
ip route 192.168.100.0/24 gateway tunnel 1
ip lan1 address 192.168.0.1/24
pp select 1
 description pp PROVIDER
 pp keepalive interval 30 retry-interval 30 count 12
 pppoe use lan2
 pp auth accept pap chap
 pp auth myname user@example.jp demo-pass
 ppp lcp mru on 1454
 ip pp mtu 1454
 ip pp nat descriptor 1000
pp enable 1
pp select anonymous
 pp bind tunnel2
 pp auth request mschap-v2
 pp auth username remote remote-pass
 ppp ipcp ipaddress on
 ip pp remote address pool 192.168.0.200-192.168.0.210
 ip pp mtu 1258
 pp enable anonymous
tunnel select 1
 description tunnel BRANCH
 ipsec tunnel 101
  ipsec sa policy 101 1 esp aes-cbc sha-hmac
  ipsec ike keepalive use 1 on
  ipsec ike local address 1 192.168.0.1
  ipsec ike pre-shared-key 1 text demo-psk
  ipsec ike remote address 1 branch.example.jp
 ip tunnel tcp mss limit auto
tunnel enable 1
tunnel select 2
 tunnel encapsulation l2tp
 ipsec tunnel 102
  ipsec sa policy 102 2 esp aes-cbc sha-hmac
  ipsec ike pre-shared-key 2 text remote-psk
  ipsec ike remote address 2 any
 l2tp tunnel disconnect time off
 ip tunnel tcp mss limit auto
tunnel enable 2
ip filter 200000 reject 10.0.0.0/8 * * * *
ip filter 200099 pass * * * * *
nat descriptor type 1000 masquerade
nat descriptor masquerade static 1000 1 192.168.0.1:500=192.168.0.1:500 udp
dhcp service server
dhcp scope 1 192.168.0.2-192.168.0.191/24
dhcp scope bind 1 192.168.0.10 00:a0:de:01:02:03
dns server pp 1
dns server select 500000 192.168.0.53 edns=on a example.local restrict pp 1
dns private address spoof on
l2tp service on l2tpv3 l2tp
sshd service on
sshd host lan1
"""


@cli.command()
@click.pass_context
def demo(ctx: click.Context) -> None:
    """Run a demo on a sample RTX configuration."""
    from rtxconf.extract.registry import extract_all
    from rtxconf.ingest.parser import ConfigParser

    click.echo(click.style("=" * 70, fg="blue"))
    click.echo(click.style("  rtxconf Demo: Context-Aware RTX Config Parsing", fg="blue", bold=True))
    click.echo(click.style("=" * 70, fg="blue"))

    config = ConfigParser(ctx.obj).parse_text(DEMO_CONFIG, device_name="DEMO-RTX")
    stream = config.stream
    click.echo(f"\nCommands: {stream.command_count}, scopes: {len(stream.scopes)}")

    records = extract_all(stream, workers=ctx.obj.workers)
    click.echo("\nExtracted records:")
    for name, items in records.items():
        click.echo(f"  {name:20s} {len(items)}")

    click.echo("\n" + click.style("  TUNNELS", bold=True))
    for tunnel in records["tunnels"]:
        l2tp = tunnel.l2tp
        click.echo(
            f"  tunnel {tunnel.tunnel_id}: {tunnel.encapsulation or 'ipsec'}"
            f" enabled={tunnel.enabled}"
            + (f" pool={l2tp.ip_pool.start}-{l2tp.ip_pool.end}" if l2tp and l2tp.ip_pool else "")
        )

    click.echo("\n" + click.style("Demo complete. Run 'rtxconf extract <config-file>' on your own configs.", fg="blue"))


if __name__ == "__main__":
    cli()
