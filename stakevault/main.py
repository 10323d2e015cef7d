"""Stake Vault CLI."""
import os
import sys
from typing import Callable, Optional, Tuple, TypeVar
import click
from loguru import logger

from .core import VaultSession
from .core.config import load_config
from .core.errors import StakingError
from .core.store import StoreError

T = TypeVar("T")


def configure_logging(level: str) -> None:
    """Send loguru output to stderr at ``level``."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format="<level>{level: <8}</level> | {message}")


def run_operation(session: VaultSession, action: str, operation: Callable[[], T], save: bool = True) -> T:
    """Run a vault call; persist on success, exit 1 on a vault error."""
    try:
        result = operation()
    except (StakingError, StoreError) as e:
        logger.error(f"{action} failed: {e}")
        sys.exit(1)
    if save:
        session.save()
    return result


def load(session: VaultSession):
    try:
        return session.get_deployment()
    except StoreError as e:
        logger.error(str(e))
        sys.exit(1)


@click.group()
@click.version_option(package_name="stake-vault")
@click.option('--data-dir', type=click.Path(file_okay=False), envvar='STAKEVAULT_DATA_DIR',
              help='Directory holding vault state')
@click.option('--log-level', default=lambda: os.getenv('STAKEVAULT_LOG_LEVEL', 'INFO'),
              type=click.Choice(['TRACE', 'DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Log verbosity')
@click.pass_context
def cli(ctx: click.Context, data_dir: Optional[str], log_level: str):
    """Stake Vault CLI for staking NFTs and claiming duration rewards."""
    configure_logging(log_level)
    ctx.obj = VaultSession(data_dir)


@cli.command()
@click.option('--admin', required=True, help='Privileged identity for rate and pause control')
@click.option('--rate', type=int, help='Reward per tick per asset')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='YAML file with vault settings')
@click.option('--force', is_flag=True, help='Replace an existing vault')
@click.pass_obj
def init(session: VaultSession, admin: str, rate: Optional[int], config_path: Optional[str], force: bool):
    """Deploy and initialize a new vault."""
    if session.store.exists() and not force:
        logger.error(f"A vault already exists in {session.data_dir}; pass --force to replace it")
        sys.exit(1)
    config = load_config(config_path)
    deployment = run_operation(
        session, "Initialization", lambda: session.create_deployment(admin, reward_rate=rate, config=config)
    )
    vault = deployment.vault
    click.echo(f"Vault {vault.address} initialized")
    click.echo(f"Admin: {vault.admin}")
    click.echo(f"Reward rate: {vault.reward_rate} per tick")
    click.echo(f"Unbonding window: {vault.unbonding_window} ticks")
    click.echo(f"Settlement window: {vault.settlement_window} ticks")


@cli.command()
@click.option('--to', 'owner', required=True, help='Account receiving the asset')
@click.option('--uri', default='', help='Metadata URI')
@click.pass_obj
def mint(session: VaultSession, owner: str, uri: str):
    """Mint a new asset."""
    deployment = load(session)
    asset_id = run_operation(session, "Mint", lambda: deployment.registry.mint(owner, uri))
    click.echo(f"Minted asset {asset_id} to {owner}")


@cli.command()
@click.option('--to', 'account', help='Account to credit (defaults to the vault reward pool)')
@click.option('--amount', required=True, type=click.IntRange(min=1), help='Reward tokens to mint')
@click.pass_obj
def fund(session: VaultSession, account: Optional[str], amount: int):
    """Mint reward tokens, by default into the vault's reward pool."""
    deployment = load(session)
    account = account or deployment.vault.address
    run_operation(session, "Funding", lambda: deployment.token.mint(account, amount))
    click.echo(f"Credited {amount} {deployment.token.symbol} to {account}")


@cli.command()
@click.option('--owner', required=True, help='Asset owner granting approval')
@click.option('--asset', 'asset_ids', type=int, multiple=True, help='Asset id to approve (repeatable)')
@click.option('--all', 'approve_all', is_flag=True, help='Approve the vault for every asset of the owner')
@click.pass_obj
def approve(session: VaultSession, owner: str, asset_ids: Tuple[int, ...], approve_all: bool):
    """Allow the vault to take custody of assets."""
    if not asset_ids and not approve_all:
        raise click.UsageError("Pass --asset at least once or --all")
    deployment = load(session)
    operator = deployment.vault.address

    def grant():
        if approve_all:
            deployment.registry.set_approval_for_all(owner, operator, True)
        for asset_id in asset_ids:
            deployment.registry.approve(owner, operator, asset_id)

    run_operation(session, "Approval", grant)
    target = "all assets" if approve_all else ", ".join(str(a) for a in asset_ids)
    click.echo(f"{owner} approved {operator} for {target}")


@cli.group()
def tick():
    """Inspect or move the tick clock."""
    pass


@tick.command()
@click.pass_obj
def show(session: VaultSession):
    """Print the current tick."""
    click.echo(str(load(session).tick))


@tick.command()
@click.argument('ticks', type=click.IntRange(min=0), default=1)
@click.pass_obj
def advance(session: VaultSession, ticks: int):
    """Advance the clock by TICKS (default 1)."""
    deployment = load(session)
    new_tick = run_operation(session, "Clock advance", lambda: deployment.advance(ticks))
    click.echo(f"Tick: {new_tick}")


@cli.command()
@click.option('--as', 'account', required=True, help='Account performing the stake')
@click.argument('asset_ids', nargs=-1, type=int)
@click.pass_obj
def stake(session: VaultSession, account: str, asset_ids: Tuple[int, ...]):
    """Stake ASSET_IDS into the vault."""
    vault = load(session).vault
    staked = run_operation(session, "Stake", lambda: vault.stake(account, asset_ids))
    click.echo(f"Staked {', '.join(str(a) for a in staked)} at tick {vault.runtime.tick}")


@cli.command()
@click.option('--as', 'account', required=True, help='Account that staked the assets')
@click.argument('asset_ids', nargs=-1, type=int)
@click.pass_obj
def unstake(session: VaultSession, account: str, asset_ids: Tuple[int, ...]):
    """Start unbonding ASSET_IDS."""
    vault = load(session).vault
    ids = run_operation(session, "Unstake", lambda: vault.unstake(account, asset_ids))
    ends = vault.runtime.tick + vault.unbonding_window
    click.echo(f"Unstaked {', '.join(str(a) for a in ids)}; withdrawable after tick {ends}")


@cli.command()
@click.option('--as', 'account', required=True, help='Account withdrawing its assets')
@click.pass_obj
def withdraw(session: VaultSession, account: str):
    """Return every unbonded asset to its owner."""
    vault = load(session).vault
    ids = run_operation(session, "Withdraw", lambda: vault.withdraw(account))
    ends = vault.runtime.tick + vault.settlement_window
    click.echo(f"Withdrew {', '.join(str(a) for a in ids)}; rewards claimable after tick {ends}")


@cli.command()
@click.option('--as', 'account', required=True, help='Account claiming rewards')
@click.pass_obj
def claim(session: VaultSession, account: str):
    """Claim rewards for every settled asset."""
    deployment = load(session)
    amount = run_operation(session, "Claim", lambda: deployment.vault.claim_rewards(account))
    click.echo(f"Claimed {amount} {deployment.token.symbol}")


@cli.group(name='admin')
def admin_cmd():
    """Privileged vault settings."""
    pass


@admin_cmd.command(name='set-rate')
@click.option('--as', 'account', required=True, help='Admin identity')
@click.option('--rate', required=True, type=int, help='New reward per tick per asset')
@click.pass_obj
def set_rate(session: VaultSession, account: str, rate: int):
    """Change the reward rate."""
    vault = load(session).vault
    old_rate = run_operation(session, "Rate update", lambda: vault.update_reward_rate(account, rate))
    click.echo(f"Reward rate: {old_rate} -> {rate}")


@admin_cmd.command()
@click.option('--as', 'account', required=True, help='Admin identity')
@click.pass_obj
def pause(session: VaultSession, account: str):
    """Stop accepting new stakes."""
    vault = load(session).vault
    run_operation(session, "Pause", lambda: vault.pause(account))
    click.echo("Staking paused")


@admin_cmd.command()
@click.option('--as', 'account', required=True, help='Admin identity')
@click.pass_obj
def unpause(session: VaultSession, account: str):
    """Resume accepting new stakes."""
    vault = load(session).vault
    run_operation(session, "Unpause", lambda: vault.unpause(account))
    click.echo("Staking resumed")


@cli.command()
@click.option('--account', help='Show only this account')
@click.pass_obj
def status(session: VaultSession, account: Optional[str]):
    """Show vault settings, records and pending sets."""
    deployment = load(session)
    vault = deployment.vault
    token = deployment.token

    click.echo(f"\nVault {vault.address} at tick {deployment.tick}")
    click.echo("-" * 80)
    click.echo(f"Admin: {vault.admin}")
    click.echo(f"Reward rate: {vault.reward_rate} per tick")
    click.echo(f"Paused: {'yes' if vault.paused else 'no'}")
    click.echo(f"Windows: unbonding {vault.unbonding_window}, settlement {vault.settlement_window}")
    click.echo(f"Reward pool: {token.balance_of(vault.address)} {token.symbol}")

    records = vault.state.ledger.records
    if account:
        records = {a: r for a, r in records.items() if r.owner == account}

    click.echo(f"\n{'Asset':<8}{'Owner':<20}{'State':<12}{'Staked':<10}{'Unbond End':<12}{'Settle End':<12}")
    click.echo("-" * 80)
    if not records:
        click.echo("No assets in custody")
    for asset_id, record in sorted(records.items()):
        unbond_end = record.unbonding_ends_at_tick if record.is_unstaked else "-"
        settle_end = record.settlement_ends_at_tick if record.is_withdrawn else "-"
        click.echo(
            f"{asset_id:<8}{record.owner:<20}{record.state.value:<12}"
            f"{record.staked_at_tick:<10}{unbond_end!s:<12}{settle_end!s:<12}"
        )

    owners = [account] if account else vault.state.index.owners()
    for owner in owners:
        pending = vault.pending_of(owner)
        click.echo(f"\n{owner}:")
        click.echo(f"  Pending: {', '.join(str(a) for a in pending) or 'none'}")
        click.echo(f"  Reward preview: {vault.preview_rewards(owner)} {token.symbol}")
        click.echo(f"  Balance: {token.balance_of(owner)} {token.symbol}")


@cli.command()
@click.option('--account', help='Show only events for this account')
@click.option('--limit', default=20, type=click.IntRange(min=1), help='Number of most recent events to show')
@click.pass_obj
def events(session: VaultSession, account: Optional[str], limit: int):
    """Show the committed event log."""
    deployment = load(session)
    entries = deployment.runtime.log.for_account(account)[-limit:]
    if not entries:
        click.echo("No events")
        return
    click.echo(f"\n{'Tick':<8}{'Event':<20}Details")
    click.echo("-" * 80)
    for event in entries:
        details = event.model_dump(exclude={"tick", "name"})
        rendered = ", ".join(f"{k}={v}" for k, v in details.items())
        click.echo(f"{event.tick:<8}{event.name:<20}{rendered}")


if __name__ == '__main__':
    cli()
