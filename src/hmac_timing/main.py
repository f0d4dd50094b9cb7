import asyncio
import os
import signal
import sys
import time

from hmac_timing.attack.session import AttackSession
from hmac_timing.attack.timing_attacker import AttackConfig
from hmac_timing.core.events import ByteResolved, PhaseChanged, PositionStarted
from hmac_timing.core.exceptions import ConfigurationError, DigestUnavailableError
from hmac_timing.services.analysis_service import AnalysisService
from hmac_timing.services.digest_service import DigestService
from hmac_timing.utils.config import DEFAULT_CONFIG_PATH, load_config
from hmac_timing.utils.logger import Logger


class ConsoleProgress:
    """Prints progress events; stands in for the chart of a graphical front end."""

    def __call__(self, event: object) -> None:
        if isinstance(event, PositionStarted):
            done = int(40 * event.byte_index / max(event.total_bytes, 1))
            bar = '#' * done + '-' * (40 - done)
            print(f"[{bar}] Testing byte {event.byte_index + 1} of {event.total_bytes}")
        elif isinstance(event, ByteResolved):
            print(f"    byte {event.byte_index + 1}: {event.byte} (Δ={event.margin:.2f}ms) -> {event.recovered_prefix}")
        elif isinstance(event, PhaseChanged) and event.message:
            print(f"    {event.phase.value.upper()}: {event.message}")


def build_session(config: dict, logger: Logger) -> AttackSession:
    thresholds = config['attack']['thresholds']
    session = AttackSession(
        secret=config['target']['secret'],
        message=config['target']['message'],
        config=AttackConfig(
            delay_per_byte=config['attack']['delay_per_byte_ms'],
            samples_per_byte=config['attack']['samples_per_byte']
        ),
        digest_service=DigestService(algorithm=config['target']['algorithm'], logger=logger),
        analyzer=AnalysisService(
            min_time_difference=thresholds['min_time_difference_ms'],
            min_separation=thresholds['min_separation'],
            logger=logger
        ),
        logger=logger
    )
    session.subscribe(ConsoleProgress())
    return session


async def _run_with_interrupt(session: AttackSession):
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, session.cancel)
    except (NotImplementedError, RuntimeError):
        # no signal handlers on this platform; Ctrl-C aborts the program instead
        pass

    try:
        return await session.start()
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass


def run_attack(session: AttackSession):
    if not session.can_start:
        print("\nDigest unavailable - cannot start the attack.\n")
        return

    estimate = session.total_bytes * 256 * session.config.samples_per_byte
    print(f"\n{'='*60}")
    print("Starting Timing Attack")
    print(f"{'='*60}")
    print(f"Target length: {session.total_bytes} bytes")
    print(f"Delay per byte: {session.config.delay_per_byte}ms")
    print(f"Samples per byte: {session.config.samples_per_byte}")
    print(f"Oracle calls: {estimate:,} (Ctrl-C to cancel)")
    print(f"{'='*60}\n")

    start_time = time.time()
    asyncio.run(_run_with_interrupt(session))
    elapsed_time = time.time() - start_time

    print(f"\n{'='*60}")
    for line in session.summary():
        print(line)
    print(f"Time: {elapsed_time:.2f} seconds ({elapsed_time/60:.1f} minutes)")
    print(f"{'='*60}\n")


def show_status(session: AttackSession):
    print(f"\n{'='*60}")
    print("Configuration")
    print(f"{'='*60}")
    print(f"Secret key: {session.secret}")
    print(f"Message: {session.message}")
    print(f"Delay per byte: {session.config.delay_per_byte}ms")
    print(f"Samples per byte: {session.config.samples_per_byte}")
    for line in session.summary():
        print(line)
    print(f"{'='*60}\n")


def verify_signature(session: AttackSession):
    signature = input("\nEnter signature (hex): ").strip()
    try:
        matches, elapsed = asyncio.run(session.verify(signature))
    except DigestUnavailableError as e:
        print(f"Cannot verify: {str(e)}")
        return
    except ValueError as e:
        print(f"Invalid signature: {str(e)}")
        return

    print(f"\n{'='*60}")
    if matches:
        print("[+] SUCCESS - Signature is valid!")
    else:
        print("✗ FAILED - Signature is invalid")
    print(f"Response time: {elapsed:.3f}ms")
    print(f"{'='*60}\n")


def change_settings(session: AttackSession):
    secret = input(f"\nSecret key (enter keeps '{session.secret}'): ")
    if secret:
        session.secret = secret

    message = input(f"Message (enter keeps '{session.message}'): ")
    if message:
        session.message = message

    delay = input(f"Delay per byte in ms (default={session.config.delay_per_byte}): ").strip()
    samples = input(f"Samples per byte (default={session.config.samples_per_byte}): ").strip()

    try:
        if delay:
            value = float(delay)
            if value <= 0:
                raise ValueError("delay must be positive")
            session.delay_per_byte = value
        if samples:
            value = int(samples)
            if value < 1:
                raise ValueError("samples must be at least 1")
            session.samples_per_byte = value
    except ValueError as e:
        print(f"\nInvalid value: {str(e)}")


def show_menu():
    print(f"\n{'='*60}")
    print("HMAC TIMING ATTACK - INTERACTIVE MENU")
    print(f"{'='*60}")
    print("1. Start New Attack")
    print("2. Show Configuration & Results")
    print("3. Verify Signature")
    print("4. Change Secret / Message / Tuning")
    print("5. Reset")
    print("6. Exit")
    print(f"{'='*60}")


def main():
    try:
        config = load_config(os.environ.get('CONFIG_PATH', DEFAULT_CONFIG_PATH))
        logger = Logger(
            name="TimingAttack",
            level=config['logging']['level'],
            log_file=config['logging'].get('file'),
            console=config['logging']['console']
        )
        session = build_session(config, logger)

        while True:
            show_menu()
            choice = input("\nSelect option (1-6): ").strip()

            if choice == '1':
                run_attack(session)
            elif choice == '2':
                show_status(session)
            elif choice == '3':
                verify_signature(session)
            elif choice == '4':
                change_settings(session)
            elif choice == '5':
                session.reset()
                print("\nAttack state reset.")
            elif choice == '6':
                print("\nExiting...\n")
                break
            else:
                print("\nInvalid option! Please select 1-6.")

        return 0

    except ConfigurationError as e:
        print(f"Configuration error: {str(e)}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n\nExiting...\n")
        return 0
    except Exception as e:
        print(f"Unexpected error: {str(e)}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 3


if __name__ == "__main__":
    sys.exit(main())
