"""nftsig CLI application with Typer."""

import logging
from pathlib import Path
from typing import Annotated, NoReturn

import typer

from nftsig import __version__
from nftsig.abi import (
    IS_VALID_SIGNATURE_SELECTOR,
    IS_VALID_SIGNATURE_SIGNATURE,
    MAGIC_VALUE,
    decode_is_valid_signature_call,
    encode_is_valid_signature_call,
    is_magic_value,
)
from nftsig.app.adapters import EthAccountSigner
from nftsig.bootstrap import ApplicationContainer, bootstrap_application
from nftsig.config import get_settings, set_settings
from nftsig.errors import NftSigError, OfflineModeError
from nftsig.utils.cli_output import json_response
from nftsig.utils.hashing import (
    format_message_hash,
    keccak_digest,
    keccak_file,
    parse_message_hash,
)
from nftsig.utils.validation import parse_token_id

app = typer.Typer(
    name="nftsig",
    help="Token-bound signatures: let an NFT endorse message hashes",
    add_completion=True,
    no_args_is_help=True,
)
token_app = typer.Typer(help="Token ownership registry")
app.add_typer(token_app, name="token")
consent_app = typer.Typer(help="Record and withdraw token consent")
app.add_typer(consent_app, name="consent")
remote_app = typer.Typer(help="Query deployed contracts over JSON-RPC (online only)")
app.add_typer(remote_app, name="remote")
abi_app = typer.Typer(help="isValidSignature calldata helpers")
app.add_typer(abi_app, name="abi")
key_app = typer.Typer(help="Manage the stored signing key")
app.add_typer(key_app, name="key")
audit_app = typer.Typer(help="Audit ledger")
app.add_typer(audit_app, name="audit")


TokenIdArg = Annotated[str, typer.Argument(help="Token id (decimal or 0x hex)")]
HashArg = Annotated[str, typer.Argument(help="32-byte message hash as hex")]
JsonFlag = Annotated[bool, typer.Option("--json", help="Output as JSON")]


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"nftsig version {__version__}")
        raise typer.Exit()


def _fail(exc: Exception, code: int = 1) -> NoReturn:
    typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=code) from exc


def _bootstrap() -> ApplicationContainer:
    try:
        return bootstrap_application()
    except (NftSigError, ValueError) as exc:
        _fail(exc)


def _parse_args(token_id: str, message_hash: str | None = None) -> tuple[int, bytes | None]:
    try:
        parsed_id = parse_token_id(token_id)
        parsed_hash = parse_message_hash(message_hash) if message_hash is not None else None
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return parsed_id, parsed_hash


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    online: Annotated[
        bool,
        typer.Option("--online", help="Enable online features (JSON-RPC calls)"),
    ] = False,
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", help="Override data directory"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log progress to stderr"),
    ] = False,
) -> None:
    """nftsig - token-bound signature validation."""
    try:
        settings = get_settings()
    except ValueError as exc:
        _fail(exc)
    if online:
        settings.online = True
    if data_dir:
        settings.data_dir = data_dir
    set_settings(settings)

    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


# Token subcommands


@token_app.command("mint")
def token_mint(
    token_id: TokenIdArg,
    owner: Annotated[str, typer.Argument(help="Owner address")],
) -> None:
    """Mint a token to OWNER."""
    parsed_id, _ = _parse_args(token_id)
    container = _bootstrap()
    try:
        record = container.registry_service.mint(parsed_id, owner)
    except (NftSigError, ValueError) as exc:
        _fail(exc)
    typer.secho(f"Minted token {record.token_id} to {record.owner}", fg=typer.colors.GREEN)


@token_app.command("transfer")
def token_transfer(
    token_id: TokenIdArg,
    sender: Annotated[str, typer.Option("--from", help="Current owner")],
    recipient: Annotated[str, typer.Option("--to", help="New owner")],
) -> None:
    """Transfer a token between addresses."""
    parsed_id, _ = _parse_args(token_id)
    container = _bootstrap()
    try:
        record = container.registry_service.transfer(parsed_id, sender, recipient)
    except (NftSigError, ValueError) as exc:
        _fail(exc)
    typer.secho(f"Token {record.token_id} now owned by {record.owner}", fg=typer.colors.GREEN)


@token_app.command("owner")
def token_owner(token_id: TokenIdArg) -> None:
    """Print the current owner of a token."""
    parsed_id, _ = _parse_args(token_id)
    container = _bootstrap()
    try:
        typer.echo(container.registry_service.owner_of(parsed_id))
    except NftSigError as exc:
        _fail(exc)


@token_app.command("list")
def token_list(json_output: JsonFlag = False) -> None:
    """List minted tokens."""
    container = _bootstrap()
    tokens = container.registry_service.list_tokens()

    if json_output:
        typer.echo(
            json_response(
                "token_list",
                1,
                total_tokens=len(tokens),
                tokens=[
                    {**t.model_dump(mode="json"), "token_id": str(t.token_id)} for t in tokens
                ],
            )
        )
        return

    if not tokens:
        typer.secho("No tokens minted", fg=typer.colors.YELLOW)
        return
    for record in tokens:
        typer.echo(f"{record.token_id} | {record.owner} | {record.updated_at}")


@token_app.command("history")
def token_history(token_id: TokenIdArg) -> None:
    """Print successive owners of a token from the audit ledger."""
    parsed_id, _ = _parse_args(token_id)
    container = _bootstrap()

    if not container.audit_service.is_enabled():
        typer.secho("Audit ledger disabled", fg=typer.colors.YELLOW)
        return

    owners = container.audit_service.owners(parsed_id)
    if not owners:
        typer.secho(f"No ownership history for token {parsed_id}", fg=typer.colors.YELLOW)
        return
    for index, address in enumerate(owners, 1):
        typer.echo(f"{index}. {address}")


# Consent subcommands


@consent_app.command("mark")
def consent_mark(
    token_id: TokenIdArg,
    message_hash: HashArg,
    caller: Annotated[str, typer.Option("--caller", help="Address marking consent")],
) -> None:
    """Mark a hash as endorsed by a token (owner only)."""
    parsed_id, parsed_hash = _parse_args(token_id, message_hash)
    container = _bootstrap()
    try:
        record = container.signature_service.mark_consent(parsed_id, parsed_hash, caller)
    except (NftSigError, ValueError) as exc:
        _fail(exc)
    typer.secho(
        f"Token {record.token_id} consents to {record.message_hash}", fg=typer.colors.GREEN
    )


@consent_app.command("sign")
def consent_sign(
    token_id: TokenIdArg,
    message_hash: HashArg,
    print_only: Annotated[
        bool,
        typer.Option("--print-only", help="Print the signature without recording consent"),
    ] = False,
) -> None:
    """Sign consent with the stored key and record it."""
    parsed_id, parsed_hash = _parse_args(token_id, message_hash)
    container = _bootstrap()

    signer = container.signer()
    if signer is None:
        _fail(RuntimeError("No signing key stored. Run `nftsig key import` first."))

    service = container.signature_service
    signature = signer.sign(service.consent_payload(parsed_id, parsed_hash))
    if print_only:
        typer.echo("0x" + signature.hex())
        return

    try:
        record = service.mark_consent_signed(parsed_id, parsed_hash, signature)
    except (NftSigError, ValueError) as exc:
        _fail(exc)
    typer.secho(
        f"Token {record.token_id} consents to {record.message_hash} (signed by {record.marked_by})",
        fg=typer.colors.GREEN,
    )


@consent_app.command("submit")
def consent_submit(
    token_id: TokenIdArg,
    message_hash: HashArg,
    signature: Annotated[str, typer.Argument(help="65-byte owner signature as hex")],
) -> None:
    """Record consent from a signature produced elsewhere."""
    parsed_id, parsed_hash = _parse_args(token_id, message_hash)
    try:
        raw_signature = bytes.fromhex(signature.removeprefix("0x"))
    except ValueError as exc:
        raise typer.BadParameter(f"Signature is not valid hex: {exc}") from exc

    container = _bootstrap()
    try:
        record = container.signature_service.mark_consent_signed(
            parsed_id, parsed_hash, raw_signature
        )
    except (NftSigError, ValueError) as exc:
        _fail(exc)
    typer.secho(
        f"Token {record.token_id} consents to {record.message_hash} (signed by {record.marked_by})",
        fg=typer.colors.GREEN,
    )


@consent_app.command("revoke")
def consent_revoke(
    token_id: TokenIdArg,
    message_hash: HashArg,
    caller: Annotated[str, typer.Option("--caller", help="Address revoking consent")],
) -> None:
    """Withdraw a token's consent for a hash (owner only)."""
    parsed_id, parsed_hash = _parse_args(token_id, message_hash)
    container = _bootstrap()
    try:
        removed = container.signature_service.revoke_consent(parsed_id, parsed_hash, caller)
    except (NftSigError, ValueError) as exc:
        _fail(exc)

    if removed:
        typer.secho("Consent revoked", fg=typer.colors.GREEN)
    else:
        typer.secho("No consent recorded for that hash", fg=typer.colors.YELLOW)


@consent_app.command("list")
def consent_list(token_id: TokenIdArg, json_output: JsonFlag = False) -> None:
    """List hashes a token consents to."""
    parsed_id, _ = _parse_args(token_id)
    container = _bootstrap()
    records = container.signature_service.list_consents(parsed_id)

    if json_output:
        typer.echo(
            json_response(
                "consent_list",
                1,
                token_id=str(parsed_id),
                consents=[
                    {**r.model_dump(mode="json"), "token_id": str(r.token_id)} for r in records
                ],
            )
        )
        return

    if not records:
        typer.secho(f"Token {parsed_id} has no consents", fg=typer.colors.YELLOW)
        return
    for record in records:
        typer.echo(f"{record.message_hash} | {record.marked_by} | {record.method}")


# Validation


def _report(token_id: int, message_hash: bytes, value: bytes, json_output: bool) -> None:
    valid = is_magic_value(value)
    if json_output:
        typer.echo(
            json_response(
                "signature_check",
                1,
                token_id=str(token_id),
                message_hash=format_message_hash(message_hash),
                result="0x" + value.hex(),
                valid=valid,
            )
        )
    elif valid:
        typer.secho(f"0x{value.hex()} valid", fg=typer.colors.GREEN)
    else:
        typer.secho(f"0x{value.hex()} invalid", fg=typer.colors.RED)

    if not valid:
        raise typer.Exit(code=1)


@app.command("verify")
def verify(token_id: TokenIdArg, message_hash: HashArg, json_output: JsonFlag = False) -> None:
    """Ask the local registry whether a token endorses a hash.

    Exits 0 when valid and 1 otherwise.
    """
    parsed_id, parsed_hash = _parse_args(token_id, message_hash)
    container = _bootstrap()
    value = container.signature_service.is_valid_signature(parsed_id, parsed_hash)
    _report(parsed_id, parsed_hash, value, json_output)


@remote_app.command("verify")
def remote_verify(
    token_id: TokenIdArg,
    message_hash: HashArg,
    rpc_url: Annotated[str | None, typer.Option("--rpc-url", help="JSON-RPC endpoint")] = None,
    contract: Annotated[str | None, typer.Option("--contract", help="NFT contract")] = None,
    json_output: JsonFlag = False,
) -> None:
    """Call isValidSignature on a deployed contract."""
    parsed_id, parsed_hash = _parse_args(token_id, message_hash)
    container = _bootstrap()

    try:
        validator = container.remote_validator_factory(rpc_url, contract)
    except OfflineModeError as exc:
        typer.secho(f"\n{exc}\nAborting.", fg=typer.colors.YELLOW)
        raise typer.Exit(code=2) from exc
    except ValueError as exc:
        _fail(exc)

    try:
        value = validator.is_valid_signature(parsed_id, parsed_hash)
    except (NftSigError, ValueError) as exc:
        _fail(exc)
    finally:
        validator.close()
    _report(parsed_id, parsed_hash, value, json_output)


# ABI helpers


@abi_app.command("selector")
def abi_selector() -> None:
    """Print the function selector and the success value."""
    typer.echo(f"{IS_VALID_SIGNATURE_SIGNATURE} selector=0x{IS_VALID_SIGNATURE_SELECTOR.hex()}")
    typer.echo(f"magic value=0x{MAGIC_VALUE.hex()}")


@abi_app.command("encode")
def abi_encode(token_id: TokenIdArg, message_hash: HashArg) -> None:
    """Print isValidSignature calldata."""
    parsed_id, parsed_hash = _parse_args(token_id, message_hash)
    typer.echo("0x" + encode_is_valid_signature_call(parsed_id, parsed_hash).hex())


@abi_app.command("decode")
def abi_decode(calldata: Annotated[str, typer.Argument(help="Calldata as hex")]) -> None:
    """Decode isValidSignature calldata."""
    try:
        token_id, message_hash = decode_is_valid_signature_call(
            bytes.fromhex(calldata.removeprefix("0x"))
        )
    except ValueError as exc:
        _fail(exc)
    typer.echo(f"tokenId={token_id}")
    typer.echo(f"hash={format_message_hash(message_hash)}")


@app.command("hash")
def hash_command(
    text: Annotated[str | None, typer.Option("--text", help="UTF-8 text to hash")] = None,
    file: Annotated[
        Path | None,
        typer.Option("--file", exists=True, dir_okay=False, help="File to hash"),
    ] = None,
) -> None:
    """Print the keccak-256 message hash of text or a file."""
    if (text is None) == (file is None):
        raise typer.BadParameter("Pass exactly one of --text or --file.")

    digest = keccak_digest(text.encode("utf-8")) if text is not None else keccak_file(file)
    typer.echo(format_message_hash(digest))


# Signing key


@key_app.command("import")
def key_import(
    private_key: Annotated[
        str,
        typer.Option(prompt=True, hide_input=True, help="Hex private key"),
    ],
) -> None:
    """Store a private key (encrypted at rest) for `consent sign`."""
    try:
        signer = EthAccountSigner(private_key)
    except ValueError as exc:
        _fail(exc)

    get_settings().store_signer_key(private_key)
    typer.secho(f"Stored key for {signer.address}", fg=typer.colors.GREEN)


@key_app.command("address")
def key_address() -> None:
    """Print the address of the stored key."""
    container = _bootstrap()
    signer = container.signer()
    if signer is None:
        typer.secho("No signing key stored", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)
    typer.echo(signer.address)


# Audit subcommands


@audit_app.command("show")
def audit_show(
    json_output: JsonFlag = False,
    tail: Annotated[
        int | None,
        typer.Option("--tail", "-n", help="Show last N entries"),
    ] = None,
    token: Annotated[
        str | None,
        typer.Option("--token", help="Only entries touching this token"),
    ] = None,
    message_hash: Annotated[
        str | None,
        typer.Option("--hash", help="With --token, only consent changes for this hash"),
    ] = None,
) -> None:
    """Show audit ledger entries."""
    if message_hash is not None and token is None:
        raise typer.BadParameter("--hash requires --token.")

    container = _bootstrap()

    if not container.audit_service.is_enabled():
        typer.secho("Audit ledger disabled", fg=typer.colors.YELLOW)
        return

    audit = container.audit_service
    if token is None:
        entries = audit.get_entries()
    else:
        parsed_id, parsed_hash = _parse_args(token, message_hash)
        if parsed_hash is None:
            entries = audit.get_entries(parsed_id)
        else:
            entries = audit.consent_history(parsed_id, parsed_hash)
    if not entries:
        typer.secho("No audit ledger entries found", fg=typer.colors.YELLOW)
        return

    if tail:
        entries = entries[-tail:]

    if json_output:
        typer.echo(
            json_response(
                "audit_log",
                1,
                total_entries=len(entries),
                entries=[e.model_dump(mode="json") for e in entries],
            )
        )
        return

    for entry in entries:
        hash_part = f" | {entry.message_hash}" if entry.message_hash else ""
        typer.echo(
            f"{entry.timestamp} | {entry.operation} | token {entry.token_id} | "
            f"{entry.actor}{hash_part}"
        )


@audit_app.command("verify")
def audit_verify() -> None:
    """Verify audit ledger integrity."""
    container = _bootstrap()

    if not container.audit_service.is_enabled():
        typer.secho("Audit ledger disabled", fg=typer.colors.YELLOW)
        return

    valid, error = container.audit_service.verify()
    if valid:
        typer.secho("Audit ledger is valid", fg=typer.colors.GREEN)
        return

    typer.secho(error or "Audit ledger integrity check failed", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
