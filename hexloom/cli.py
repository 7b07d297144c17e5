import logging
import time

import click

from .bbp import pi_hex_window
from .config import EngineConfig
from .constants import DEFAULT_POSITION, DEFAULT_WINDOW, MAX_WINDOW, ORDERS, POOL_KINDS, SUBSTRATES
from .dispatch import DispatchError
from .formats import serialize_result
from .log import setup_logging
from .reference import reference_hex_digits
from .verify import verify_window

log = logging.getLogger(__name__)

_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _engine_options(f):
    f = click.option("--order", type=click.Choice(ORDERS, case_sensitive=False), default="forward", show_default=True, envvar="HEXLOOM_ORDER")(f)
    f = click.option("--pool", "kind", type=click.Choice(POOL_KINDS, case_sensitive=False), default=None, envvar="HEXLOOM_POOL")(f)
    f = click.option("--chunk-size", default=None, type=int, envvar="HEXLOOM_CHUNK_SIZE")(f)
    f = click.option("--workers", default=None, type=int, envvar="HEXLOOM_WORKERS")(f)
    f = click.option("--substrate", type=click.Choice(SUBSTRATES, case_sensitive=False), default="cpu", show_default=True, envvar="HEXLOOM_SUBSTRATE")(f)
    return f


def _logging_options(f):
    f = click.option("--quiet", is_flag=True)(f)
    f = click.option("--log-level", type=click.Choice(_LEVELS, case_sensitive=False), default="INFO", show_default=True, envvar="HEXLOOM_LOG_LEVEL")(f)
    return f


def _config(substrate, workers, chunk_size, kind, order) -> EngineConfig:
    try:
        return EngineConfig(substrate, workers, chunk_size, kind, order).validate()
    except ValueError as exc:
        raise click.ClickException(str(exc))


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def main():
    pass


@main.command()
@click.argument("position", default=DEFAULT_POSITION, type=int)
@click.option("--count", default=DEFAULT_WINDOW, show_default=True, type=click.IntRange(1, MAX_WINDOW))
@_engine_options
@click.option("--format", "fmt", type=click.Choice(["txt", "json", "ndjson", "csv", "tsv"], case_sensitive=False), default="txt", show_default=True)
@click.option("--out", "out_path", default="", show_default=True)
@click.option("--verify/--no-verify", default=False, show_default=True)
@_logging_options
def digits(
    position: int,
    count: int,
    substrate: str,
    workers: int,
    chunk_size: int,
    kind: str,
    order: str,
    fmt: str,
    out_path: str,
    verify: bool,
    log_level: str,
    quiet: bool,
):
    setup_logging(log_level, quiet)
    if position < 1:
        raise click.ClickException("POSITION must be >= 1")
    cfg = _config(substrate, workers, chunk_size, kind, order)
    log.info("Bailey-Borwein-Plouffe Formula for Pi")
    log.info("Calculating Position: %d, Using %d %s workers", position, cfg.resolved_workers, cfg.substrate)
    started = time.perf_counter()
    try:
        with cfg.dispatcher() as dispatcher:
            s = pi_hex_window(position, count, dispatcher=dispatcher, order=cfg.order)
    except DispatchError as exc:
        raise click.ClickException(str(exc))
    log.info("Computed in %.3fs", time.perf_counter() - started)
    if verify:
        ok, how = verify_window(position, s)
        if not ok:
            raise click.ClickException(f"verification failed ({how})")
        log.info("Verified against mpmath reference (%s)", how)
    if out_path:
        meta = {"position": position, "count": count, "substrate": cfg.substrate, "workers": cfg.resolved_workers}
        payload, _ = serialize_result(s, fmt, meta)
        with open(out_path, "wb") as f:
            f.write(payload)
        click.echo(out_path)
    else:
        click.echo(s)


@main.command()
@_engine_options
@_logging_options
def device(substrate: str, workers: int, chunk_size: int, kind: str, order: str, log_level: str, quiet: bool):
    setup_logging(log_level, quiet)
    cfg = _config(substrate, workers, chunk_size, kind, order)
    try:
        with cfg.dispatcher() as dispatcher:
            info = dispatcher.device_info()
    except DispatchError as exc:
        raise click.ClickException(str(exc))
    width = max(len(k) for k in info)
    for key, value in info.items():
        click.echo(f"{key.replace('_', ' ').rjust(width)}: {value}")


@main.command()
@click.argument("start", type=click.IntRange(0))
@click.argument("count", type=click.IntRange(0))
def reference(start: int, count: int):
    click.echo(reference_hex_digits(start, count))
