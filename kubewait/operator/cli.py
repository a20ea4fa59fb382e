import argparse
import logging
import os
import signal
import sys
import threading

from kubewait.errors import (
    ClientConfigError,
    KubeWaitError,
    MalformedCondition,
    WaitCancelled,
    WaitTimeout,
)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kubewait",
        description="Wait for Kubernetes resources to meet a condition",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (overrides --log-level to DEBUG)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("operator", help="Run the KubeWait operator")

    wait = sub.add_parser("wait", help="Wait once for a condition and exit")
    wait.add_argument("resource", help="Resource kind, optionally KIND/NAME (e.g. pods, deployment/my-app)")
    wait.add_argument("--for", dest="condition", required=True, help="Condition, e.g. condition=Ready")
    wait.add_argument("-n", "--namespace", default="", help="Namespace (defaults to 'default')")
    wait.add_argument("-l", "--selector", default="", help="Label selector")
    wait.add_argument("--field-selector", default="", help="Field selector")
    wait.add_argument("--all", action="store_true", help="Require every matching object to meet the condition")
    wait.add_argument("--timeout", type=int, default=300, help="Seconds to wait (default 300)")
    wait.add_argument("--interval", type=int, default=5, help="Seconds between checks (default 5)")
    wait.add_argument(
        "--kubeconfig-type",
        choices=("auto", "raw", "file", "provider"),
        default=None,
        help="Where credentials come from; defaults to 'file' with --kubeconfig, else inherited",
    )
    wait.add_argument("--kubeconfig", default="", help="Kubeconfig path (or content with --kubeconfig-type raw)")
    wait.add_argument("--context", default="", help="Kubeconfig context")
    return parser


def configure_logging(args) -> str:
    level_name = "DEBUG" if args.debug else args.log_level.upper()
    os.environ["LOG_LEVEL"] = level_name
    if args.debug:
        os.environ["DEBUG"] = "true"

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    return level_name


def run_wait(args, lifecycle=None, cancel=None) -> int:
    from kubewait.kube.client import ProviderConfig
    from kubewait.lifecycle import WaitDeclaration, WaitLifecycle

    log = logging.getLogger("kubewait.cli")
    kind, _, name = args.resource.partition("/")
    config_type = args.kubeconfig_type or ("file" if args.kubeconfig else "provider")
    decl = WaitDeclaration(
        condition=args.condition,
        resource=kind,
        name=name,
        namespace=args.namespace,
        all=args.all,
        timeout=args.timeout,
        check_interval=args.interval,
        labels=args.selector,
        field_selector=args.field_selector,
        kube_config_type=config_type,
        kube_config=args.kubeconfig,
        context=args.context,
    )
    lifecycle = lifecycle or WaitLifecycle(provider=ProviderConfig.from_env())
    cancel = cancel if cancel is not None else threading.Event()

    try:
        record = lifecycle.create(decl, cancel=cancel)
    except (MalformedCondition, ClientConfigError, ValueError) as e:
        log.error("%s", e)
        return EXIT_INVALID
    except WaitCancelled as e:
        print(e.result.message if e.result else str(e))
        return EXIT_CANCELLED
    except WaitTimeout as e:
        print(e.result.message)
        if e.last_observed is not None:
            print(f"last observed: {e.last_observed.message}")
        return EXIT_FAILED
    except KubeWaitError as e:
        log.error("wait failed: %s", e)
        return EXIT_FAILED

    print(record.message)
    return EXIT_OK


def main(argv=None):
    args = build_parser().parse_args(argv)
    level_name = configure_logging(args)

    if args.command == "operator":
        logging.getLogger(__name__).info(
            "Starting KubeWait operator with level %s", level_name
        )
        from .main import main as operator_main

        operator_main()
        return

    cancel = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: cancel.set())
    signal.signal(signal.SIGTERM, lambda *_: cancel.set())
    sys.exit(run_wait(args, cancel=cancel))
