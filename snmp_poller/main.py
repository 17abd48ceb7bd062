"""
SNMP Poller - Main Entry Point.

Polls the configured hosts for SNMP get and walk OIDs at a fixed
interval and emits one record per host and cycle.
"""

import argparse
import asyncio
import logging
import logging.handlers
import signal
import sys
from pathlib import Path

import yaml

from .core.config import Config, LoggingConfig, get_default_config_path
from .core.errors import ConfigError
from .collectors.registry import ClientRegistry
from .collectors.poll_cycle import PollCycleExecutor
from .collectors.snmp_client import SnmpClient
from .services.scheduler import Scheduler
from .services.sinks import DecoratingSink, MqttSink, StdoutSink


logger = logging.getLogger(__name__)


def setup_logging(config: LoggingConfig, verbose: bool = False):
    """Configure the root logger from the logging configuration."""
    handlers = [logging.StreamHandler(sys.stderr)]
    if config.file_path:
        Path(config.file_path).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            config.file_path,
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
        ))

    logging.basicConfig(
        level=logging.DEBUG if verbose else config.level.upper(),
        format=config.format,
        handlers=handlers,
        force=True,
    )


class PollerApplication:
    """
    Main application that coordinates all components.

    - Validates the configuration and registers one client per host
    - Runs poll cycles on a fixed interval
    - Sends the resulting records to the configured output
    """

    def __init__(self, config: Config, sink=None, client_factory=SnmpClient):
        self.config = config
        self.registry = ClientRegistry.from_config(config.poller, client_factory=client_factory)

        self.output = sink if sink is not None else self._create_output()
        self.executor = PollCycleExecutor(
            self.registry,
            oid_root_skip=config.poller.oid_root_skip,
            sink=DecoratingSink(self.output, config.poller.add_field),
            max_concurrency=config.poller.max_concurrency,
        )
        self.scheduler = Scheduler(self.executor, config.poller.interval)

    def _create_output(self):
        if self.config.output.type == "mqtt":
            return MqttSink(self.config.mqtt)
        if self.config.output.type != "stdout":
            raise ConfigError(f"unknown output type '{self.config.output.type}', expected stdout or mqtt")
        return StdoutSink()

    async def start(self):
        logger.info(f"Starting SNMP poller for {len(self.registry)} hosts...")
        start = getattr(self.output, "start", None)
        if start is not None:
            await start()

    async def stop(self):
        """Request the scheduler to stop after the current cycle."""
        self.scheduler.stop()

    async def run(self):
        """Run until stopped, then release all resources."""
        await self.start()
        try:
            await self.scheduler.run()
        finally:
            await self.shutdown()

    async def run_once(self):
        """Run a single poll cycle."""
        await self.start()
        try:
            return await self.executor.run_cycle()
        finally:
            await self.shutdown()

    async def shutdown(self):
        stop = getattr(self.output, "stop", None)
        if stop is not None:
            await stop()
        self.registry.close()
        logger.info("SNMP poller stopped")


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Poll SNMP hosts for get and walk OIDs at a fixed interval"
    )

    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to configuration file (YAML)"
    )

    parser.add_argument(
        "-i", "--interval",
        type=int,
        default=None,
        help="Seconds between poll cycles (default: 30)"
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single poll cycle and exit"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--generate-config",
        action="store_true",
        help="Generate a sample configuration file"
    )

    return parser.parse_args(argv)


async def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Generate sample config if requested
    if args.generate_config:
        config = Config()
        config_path = "config/config.yaml"
        Path("config").mkdir(exist_ok=True)
        config.to_yaml(config_path)
        print(f"Generated sample configuration: {config_path}")
        return 0

    # Load configuration
    config_path = args.config or get_default_config_path()
    try:
        config = Config.from_yaml(config_path)
    except (TypeError, ValueError, yaml.YAMLError) as e:
        setup_logging(LoggingConfig(), args.verbose)
        logger.error(f"Invalid configuration file {config_path}: {e}")
        return 1

    setup_logging(config.logging, args.verbose)
    logger.info(f"Loaded configuration from {config_path}")

    # Apply command line overrides
    if args.interval is not None:
        config.poller.interval = args.interval

    try:
        app = PollerApplication(config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    if args.once:
        await app.run_once()
        return 0

    # Setup signal handlers
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Received shutdown signal")
        app.scheduler.stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    await app.run()
    return 0


def run():
    """Entry point for the application."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nShutdown complete")


if __name__ == "__main__":
    run()
