"""Command-line interface for storage monitor."""

import json
import logging
import os
import sys
from dataclasses import replace
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, List, Optional

import click

from .config.config_manager import ConfigManager
from .core.models import AggregateStats, EntryStats, ThresholdKind
from .core.monitor import ThresholdMonitor
from .core.scanner import DirectoryScanner
from .core.volumes import list_volumes, resolve_volume
from .notifiers import EmailNotifier, build_notifier
from .utils.formatters import (
    format_file_size,
    format_gb,
    format_percentage,
    format_timestamp,
    truncate_string,
)

SORT_KEYS = {
    'size': lambda e: e.size_bytes,
    'name': lambda e: e.name.lower(),
    'count': lambda e: e.contained_file_count,
    'modified': lambda e: e.modified_at,
}


def setup_logging(level: str, log_file: Optional[str] = None,
                  max_size_mb: int = 10, backup_count: int = 5):
    """Set up logging configuration."""
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = RotatingFileHandler(
                log_file, maxBytes=max_size_mb * 1024 * 1024, backupCount=backup_count
            )
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            click.echo(f"Warning: Could not set up file logging: {e}", err=True)


def _load_config(ctx) -> ConfigManager:
    """Load configuration and apply its logging section unless overridden."""
    config_manager = ConfigManager(ctx.obj.get('config_path'))
    config_manager.load_config()

    logging_config = config_manager.get_logging_config()
    setup_logging(
        ctx.obj.get('log_level') or logging_config.get('level', 'INFO'),
        ctx.obj.get('log_file') or logging_config.get('file'),
        logging_config.get('max_size_mb', 10),
        logging_config.get('backup_count', 5),
    )
    return config_manager


@click.group()
@click.option('--config', '-c', 'config_path',
              help='Path to configuration file')
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level (default: from configuration, else WARNING)')
@click.option('--log-file',
              help='Log file path')
@click.pass_context
def cli(ctx, config_path: Optional[str], log_level: Optional[str], log_file: Optional[str]):
    """Storage Monitor - Inventory disk usage and alert on storage thresholds."""
    ctx.ensure_object(dict)

    setup_logging(log_level or 'WARNING', log_file)

    ctx.obj['config_path'] = config_path
    ctx.obj['log_level'] = log_level
    ctx.obj['log_file'] = log_file


@cli.command()
@click.argument('path', type=click.Path())
@click.option('--output', '-o', type=click.Choice(['text', 'json']), default='text',
              help='Output format')
@click.option('--sort', 'sort_by', type=click.Choice(list(SORT_KEYS)), default='size',
              help='Sort entries by this column')
@click.option('--ascending', is_flag=True, help='Sort in ascending order')
@click.option('--limit', '-n', type=click.IntRange(min=0), default=None,
              help='Show at most this many entries')
@click.option('--workers', '-w', type=click.IntRange(min=1), default=None,
              help='Number of scan worker threads')
def scan(path: str, output: str, sort_by: str, ascending: bool,
         limit: Optional[int], workers: Optional[int]):
    """Scan a directory and show per-entry storage usage."""
    directory = os.path.abspath(path)

    try:
        with DirectoryScanner(max_workers=workers) as scanner:
            entries, aggregate = scanner.scan(directory)
    except Exception as e:
        click.echo(f"Error during scan: {e}", err=True)
        sys.exit(1)

    entries.sort(key=SORT_KEYS[sort_by], reverse=not ascending)
    if limit is not None:
        entries = entries[:limit]

    try:
        volume = resolve_volume(directory, list_volumes(), fallback_to_first=True)
    except OSError as e:
        logging.getLogger(__name__).warning(f"Could not read volume information: {e}")
        volume = None

    if output == 'json':
        click.echo(json.dumps(_scan_to_dict(directory, entries, aggregate, volume), indent=2))
        return

    click.echo(f"\n{directory}")
    click.echo("=" * 70)

    if not entries:
        click.echo("  (empty directory)")

    for entry in entries:
        icon = "📁" if entry.is_directory else "📄"
        count = f"{entry.contained_file_count:,}" if entry.is_directory else "-"
        click.echo(
            f"  {icon} {truncate_string(entry.name, 36):<36} "
            f"{format_file_size(entry.size_bytes):>11} "
            f"{format_percentage(entry.size_bytes, aggregate.total_size_bytes):>6} "
            f"{count:>9}  {format_timestamp(entry.modified_at)}"
        )

    click.echo("")
    click.echo(f"Total size: {format_file_size(aggregate.total_size_bytes)}")
    click.echo(f"Total files: {aggregate.total_file_count:,}")

    top_extensions = _top_extensions(aggregate, 10)
    if top_extensions:
        click.echo("\nTop file types:")
        for extension, usage in top_extensions:
            click.echo(
                f"  {extension:<12} {format_file_size(usage['size']):>11} "
                f"{format_percentage(usage['size'], aggregate.total_size_bytes):>6} "
                f"({usage['count']:,} files)"
            )

    if volume:
        click.echo(
            f"\nVolume {volume.mount_point}: {format_file_size(volume.available_bytes)} available "
            f"of {format_file_size(volume.total_bytes)}"
        )


@cli.command()
@click.option('--output', '-o', type=click.Choice(['text', 'json']), default='text',
              help='Output format')
def volumes(output: str):
    """List mounted volumes and their free space."""
    try:
        volume_list = list_volumes()
    except Exception as e:
        click.echo(f"Error listing volumes: {e}", err=True)
        sys.exit(1)

    if output == 'json':
        click.echo(json.dumps([
            {
                'mount_point': v.mount_point,
                'total': v.total_bytes,
                'used': v.used_bytes,
                'available': v.available_bytes,
            }
            for v in volume_list
        ], indent=2))
        return

    for v in volume_list:
        click.echo(
            f"💾 {v.mount_point:<30} total {format_file_size(v.total_bytes):>11}  "
            f"used {format_file_size(v.used_bytes):>11}  "
            f"available {format_file_size(v.available_bytes):>11}"
        )


@cli.command()
@click.option('--notify/--no-notify', default=True,
              help='Deliver alerts through the configured notifier')
@click.pass_context
def check(ctx, notify: bool):
    """Check every monitored path once and report threshold violations."""
    try:
        config_manager = _load_config(ctx)
        settings = config_manager.get_monitor_settings()
        if not notify:
            settings = replace(settings, alerts_enabled=False)

        monitor = ThresholdMonitor(
            config_manager,
            build_notifier(config_manager.get_email_config(),
                           config_manager.get_alerts_config().get('subject', 'Storage Monitor Alert')),
            scanner=DirectoryScanner(config_manager.get_monitoring_config().get('max_workers')),
        )
        try:
            events = monitor.run_cycle(settings)
        finally:
            monitor.scanner.close()
    except Exception as e:
        click.echo(f"Error checking thresholds: {e}", err=True)
        sys.exit(1)

    click.echo(f"Checked {len(settings.paths)} monitored paths")

    if not events:
        click.echo("✅ All monitored paths are within their thresholds")
        return

    for event in events:
        click.echo(f"⚠️  {event.rendered_message}")
    sys.exit(2)


@cli.command()
@click.pass_context
def watch(ctx):
    """Run the threshold monitor until interrupted."""
    try:
        config_manager = _load_config(ctx)
        monitor = ThresholdMonitor(
            config_manager,
            build_notifier(config_manager.get_email_config(),
                           config_manager.get_alerts_config().get('subject', 'Storage Monitor Alert')),
            scanner=DirectoryScanner(config_manager.get_monitoring_config().get('max_workers')),
        )
    except Exception as e:
        click.echo(f"Error starting monitor: {e}", err=True)
        sys.exit(1)

    click.echo("Monitoring storage thresholds, press Ctrl+C to stop...")
    try:
        monitor.run()
    except KeyboardInterrupt:
        click.echo("\nStopping monitor")
    finally:
        monitor.stop()
        monitor.scanner.close()


@cli.command()
@click.pass_context
def validate_config(ctx):
    """Validate configuration file."""
    try:
        config_manager = ConfigManager(ctx.obj.get('config_path'))
        config_manager.load_config()
        settings = config_manager.get_monitor_settings()

        click.echo("✅ Configuration loaded successfully")

        click.echo("\n📊 Configuration Summary:")
        click.echo(f"   Monitoring: {'enabled' if settings.enabled else 'disabled'}, "
                   f"every {format_gb(settings.check_interval_seconds / 60)} minutes")
        click.echo(f"   Monitored paths: {len(settings.paths)}")

        for i, monitored in enumerate(settings.paths, 1):
            label = "max used" if monitored.threshold_kind is ThresholdKind.MAX_USED_BYTES else "min remaining"
            click.echo(f"     {i}. {monitored.path} ({label} {format_gb(monitored.threshold_value)} GB)")

        click.echo(f"   🔔 Alerts: {'enabled' if settings.alerts_enabled else 'disabled'}")

        email_config = config_manager.get_email_config()
        if not email_config:
            click.echo("   📧 Email: Not configured, alerts are written to the log")
            return

        click.echo(f"   📧 Email configured: {email_config.get('from_address', 'N/A')}")
        click.echo(f"   📬 Recipients: {len(email_config.get('to_addresses', []))}")

        email_errors = build_notifier(email_config).validate_configuration()
        if email_errors:
            click.echo("\n⚠️  Email configuration issues:")
            for error in email_errors:
                click.echo(f"     • {error}")
        else:
            click.echo("\n✅ Email configuration valid")

    except Exception as e:
        click.echo(f"❌ Configuration validation failed: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def test_notify(ctx):
    """Send a test message through the configured notifier."""
    try:
        config_manager = _load_config(ctx)
        notifier = build_notifier(config_manager.get_email_config(),
                                  config_manager.get_alerts_config().get('subject', 'Storage Monitor Alert'))

        click.echo("Sending test notification...")

        if isinstance(notifier, EmailNotifier):
            errors = notifier.validate_configuration()
            if errors:
                click.echo("❌ Email configuration errors:")
                for error in errors:
                    click.echo(f"   • {error}")
                sys.exit(1)
            notifier.send_test_message()
            click.echo(f"✅ Test email sent to {', '.join(notifier.to_addresses)}")
        else:
            notifier.deliver("This is a test message from Storage Monitor.")
            click.echo("✅ Test message written to the log (no email configured)")

    except Exception as e:
        click.echo(f"Error sending test notification: {e}", err=True)
        sys.exit(1)


def _top_extensions(aggregate: AggregateStats, limit: int) -> List:
    ranked = sorted(
        aggregate.extension_distribution.items(),
        key=lambda item: item[1].size_bytes,
        reverse=True,
    )
    return [
        (extension, {'size': usage.size_bytes, 'count': usage.file_count})
        for extension, usage in ranked[:limit]
    ]


def _scan_to_dict(directory: str, entries: List[EntryStats], aggregate: AggregateStats,
                  volume) -> Dict[str, Any]:
    """Convert scan results to a JSON-serializable structure."""
    parent = os.path.dirname(directory.rstrip(os.sep)) or None
    if parent == directory:
        parent = None

    return {
        'current': directory,
        'parent': parent,
        'files': [
            {
                'path': e.path,
                'name': e.name,
                'is_dir': e.is_directory,
                'size': e.size_bytes,
                'file_count': e.contained_file_count,
                'modified': e.modified_at,
            }
            for e in entries
        ],
        'total_size': aggregate.total_size_bytes,
        'total_files': aggregate.total_file_count,
        'extensions': {
            extension: {'size': usage.size_bytes, 'count': usage.file_count}
            for extension, usage in aggregate.extension_distribution.items()
        },
        'disk_total': volume.total_bytes if volume else None,
        'disk_available': volume.available_bytes if volume else None,
    }


def main():
    """Main CLI entry point."""
    cli()


if __name__ == '__main__':
    main()
