"""
Main CLI module for the customer service.

Provides a command-line interface to the customer API, the RUT codec and the
region/commune table.
Example: python -m services.clientes get 76086428
"""

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from . import __version__
from .display import cliente_detail, cliente_row
from .helpers.rut import InvalidRUTError, check_digit, format_rut, validate_rut
from .log_config import configure_logging, get_logger
from .models import OperationResult, TipoCliente
from .service import ClienteService
from .settings import settings
from .ubicacion import RegionCommuneSelection, communes_for, list_regions
from .workflows import create_cliente, load_for_edit, search_clientes, update_cliente

logger = get_logger(__name__)

# Fields accepted by create/update, mapped to their CLI option
CLIENTE_FIELDS = (
    "codaux", "nombre", "rut", "direccion", "numero",
    "fono", "email", "region", "comuna", "ciudad", "tipo",
)


def emit(data: Any) -> None:
    """Print a JSON document on stdout."""
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _form_values(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        field: getattr(args, field)
        for field in CLIENTE_FIELDS
        if getattr(args, field, None) is not None
    }


def _emit_result(result: OperationResult) -> int:
    emit({"success": result.success, "message": result.message})
    return 0 if result.success else 1


def cmd_list(service: ClienteService, args: argparse.Namespace) -> int:
    limit = args.limit or settings().page_size
    result = service.list_clientes(args.page, limit, all=args.all)
    if not result.success:
        return _emit_result(result)

    emit({
        "total": result.pagination.total,
        "page": args.page,
        "clientes": [cliente_row(cliente) for cliente in result.clientes],
    })
    return 0


def cmd_get(service: ClienteService, args: argparse.Namespace) -> int:
    result = service.get_by_code(args.codaux)
    if not result.success or result.cliente is None:
        emit({"success": False, "message": result.message or "Cliente no encontrado"})
        return 1

    emit(cliente_detail(result.cliente))
    return 0


def cmd_create(service: ClienteService, args: argparse.Namespace) -> int:
    return _emit_result(create_cliente(service, _form_values(args)))


def _apply_location(values: Dict[str, Any], changes: Dict[str, Any]) -> None:
    """Apply region/commune edits through the cascading selector."""
    region = changes.pop("region", values.get("region"))
    comuna = changes.pop("comuna", None)
    if region == values.get("region") and comuna is None:
        return

    # A new region clears the stored commune; a given commune must belong to it
    selection = RegionCommuneSelection(region, comuna)
    values["region"] = selection.region
    values["comuna"] = selection.comuna


def cmd_update(service: ClienteService, args: argparse.Namespace) -> int:
    # Full-record update: start from the stored record and apply the changes
    form = load_for_edit(service, args.codaux)
    if not form.success:
        return _emit_result(form.result)

    values = dict(form.initial)
    changes = _form_values(args)
    try:
        _apply_location(values, changes)
    except ValueError as e:
        return _emit_result(OperationResult.failure(str(e)))
    values.update(changes)

    return _emit_result(update_cliente(service, args.codaux, values))


def cmd_delete(service: ClienteService, args: argparse.Namespace) -> int:
    return _emit_result(service.remove(args.codaux))


def cmd_search(service: ClienteService, args: argparse.Namespace) -> int:
    result = search_clientes(
        service,
        search_text=args.text,
        region=args.region,
        ciudad=args.ciudad,
        page_size=settings().page_size,
    )
    if not result.success:
        return _emit_result(result)

    emit({
        "resultados": len(result.clientes),
        "clientes": [cliente_row(cliente) for cliente in result.clientes],
    })
    return 0


def cmd_rut(args: argparse.Namespace) -> int:
    if args.rut_command == "validate":
        valid = validate_rut(args.value)
        emit({"rut": args.value, "valid": valid})
        return 0 if valid else 1

    try:
        if args.rut_command == "format":
            emit({"rut": args.value, "formatted": format_rut(args.value)})
        else:
            emit({"body": args.value, "dv": check_digit(args.value)})
    except InvalidRUTError as e:
        emit({"rut": args.value, "error": str(e)})
        return 1
    return 0


def cmd_regiones(args: argparse.Namespace) -> int:
    emit([region._asdict() for region in list_regions()])
    return 0


def cmd_comunas(args: argparse.Namespace) -> int:
    emit([comuna._asdict() for comuna in communes_for(args.region)])
    return 0


API_COMMANDS = {
    "list": cmd_list,
    "get": cmd_get,
    "create": cmd_create,
    "update": cmd_update,
    "delete": cmd_delete,
    "search": cmd_search,
}

LOCAL_COMMANDS = {
    "rut": cmd_rut,
    "regiones": cmd_regiones,
    "comunas": cmd_comunas,
}


def _add_cliente_options(parser: argparse.ArgumentParser, include_codaux: bool) -> None:
    if include_codaux:
        parser.add_argument("--codaux", required=True, help="Código auxiliar (unique key)")
    parser.add_argument("--nombre", help="Customer name")
    parser.add_argument("--rut", help="RUT, with or without dots and hyphen")
    parser.add_argument("--direccion", help="Street")
    parser.add_argument("--numero", help="Street number")
    parser.add_argument("--fono", help="Phone")
    parser.add_argument("--email", help="Email")
    parser.add_argument("--region", help="Region id (see 'regiones')")
    parser.add_argument("--comuna", help="Commune name (see 'comunas REGION')")
    parser.add_argument("--ciudad", help="City")
    parser.add_argument(
        "--tipo",
        choices=[tipo.value for tipo in TipoCliente],
        help="Customer type"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description="Customer (cliente) management",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m services.clientes list --page 2
  python -m services.clientes create --codaux 12345678 --nombre "Juan Pérez" --rut 12.345.678-5
  python -m services.clientes search --text perez --region 13
  python -m services.clientes rut format 123456785
  python -m services.clientes comunas 13
        """
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override log level from configuration"
    )

    parser.add_argument(
        "--log-format",
        choices=["json", "text"],
        help="Override log format from configuration"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Clientes Service {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List customers")
    list_parser.add_argument("--page", type=int, default=1, help="Page number (1-based)")
    list_parser.add_argument("--limit", type=int, help="Customers per page")
    list_parser.add_argument("--all", action="store_true", help="Fetch every customer")

    get_parser = subparsers.add_parser("get", help="Show a customer")
    get_parser.add_argument("codaux", help="Código auxiliar")

    create_cmd = subparsers.add_parser("create", help="Create a customer")
    _add_cliente_options(create_cmd, include_codaux=True)

    update_parser = subparsers.add_parser("update", help="Update a customer")
    update_parser.add_argument("codaux", help="Código auxiliar")
    _add_cliente_options(update_parser, include_codaux=False)

    delete_parser = subparsers.add_parser("delete", help="Delete a customer")
    delete_parser.add_argument("codaux", help="Código auxiliar")

    search_parser = subparsers.add_parser("search", help="Search customers")
    search_parser.add_argument("--text", help="Free text (name, code, RUT)")
    search_parser.add_argument("--region", help="Region id")
    search_parser.add_argument("--ciudad", help="City (substring)")

    rut_parser = subparsers.add_parser("rut", help="RUT utilities")
    rut_subparsers = rut_parser.add_subparsers(dest="rut_command", required=True)
    for name, help_text in (
        ("format", "Format a RUT for display"),
        ("validate", "Validate a RUT's check digit"),
        ("dv", "Compute the check digit of a RUT body"),
    ):
        rut_subparsers.add_parser(name, help=help_text).add_argument("value")

    subparsers.add_parser("regiones", help="List regions")

    comunas_parser = subparsers.add_parser("comunas", help="List communes of a region")
    comunas_parser.add_argument("region", help="Region id")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI application.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Configure logging with CLI overrides
    if args.log_level or args.log_format:
        configure_logging(args.log_level, args.log_format)

    if args.command in LOCAL_COMMANDS:
        return LOCAL_COMMANDS[args.command](args)

    config = settings()
    logger.info(
        "Service starting",
        service_name=config.service_name,
        version=__version__,
        environment=config.environment,
        command=args.command
    )

    try:
        with ClienteService.from_settings(config) as service:
            return API_COMMANDS[args.command](service, args)
    except KeyboardInterrupt:
        logger.warning("Service interrupted by user")
        return 1


def cli_main():
    """Synchronous entry point for setuptools console scripts."""
    return main()


if __name__ == "__main__":
    sys.exit(main())
