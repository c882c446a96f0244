#!/usr/bin/env python3
"""
Interactive console demo for the RedLine voice assistant.

Typed lines stand in for speech transcripts and spoken responses are printed.

Usage:
    python scripts/demo.py                   # Default config
    python scripts/demo.py --word-boundary   # Whole-word keyword matching
    python scripts/demo.py --dedupe          # Drop repeated values across turns
    python scripts/demo.py --verbose         # Debug logging
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from redline import CarFilters, create_controller
from redline.utils.logger import set_log_level
from redline.voice import SpeechOptions, SpeechProvider, VoiceSession


class ConsoleSpeechProvider(SpeechProvider):
    """Prints synthesized speech; recognition is driven by input() instead."""

    @property
    def supports_recognition(self) -> bool:
        return False

    def start_recognition(self, on_result, on_error, on_end) -> None:
        pass

    def stop_recognition(self) -> None:
        pass

    def speak(self, text: str, options: SpeechOptions, on_end, on_error) -> None:
        print(f"\nAssistant: {text}")
        on_end()

    def cancel_speech(self) -> None:
        pass


def display_filters(filters: CarFilters) -> None:
    """Show the filters the inventory page would receive."""
    print("-" * 40)
    data = filters.to_dict()
    if not data:
        print("Filters: (none)")
        return
    print("Filters:")
    for key, value in data.items():
        print(f"  {key}: {value}")


def display_search(filters: CarFilters) -> None:
    print("\n" + "=" * 60)
    print("SEARCH TRIGGERED")
    print("=" * 60)
    display_filters(filters)


def main():
    parser = argparse.ArgumentParser(description='Interactive RedLine voice assistant demo')
    parser.add_argument('--word-boundary', action='store_true',
                        help='Match keywords as whole words instead of substrings')
    parser.add_argument('--dedupe', action='store_true',
                        help='Drop repeated list values when merging turns')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable debug logging')
    args = parser.parse_args()

    if args.verbose:
        set_log_level('DEBUG')

    controller = create_controller(
        word_boundary_matching=args.word_boundary,
        dedupe_on_merge=args.dedupe,
    )

    print("=" * 60)
    print(f"{controller.config.dealership_name.upper()} - Voice Assistant Demo")
    print("=" * 60)
    print(f"Configuration: word_boundary={args.word_boundary}, dedupe={args.dedupe}")
    print("Type 'quit' to exit, 'reset' to start over")
    print("=" * 60)

    session = VoiceSession(
        controller,
        ConsoleSpeechProvider(),
        on_filters_update=display_filters,
        on_search=display_search,
        on_error=lambda title, description: print(f"\n[{title}] {description}"),
        on_notify=lambda title, description: print(f"\n[{title}] {description}"),
    )
    session.open()

    while True:
        try:
            user_input = input("\nYou: ").strip()

            if not user_input:
                continue

            if user_input.lower() == 'quit':
                print("Goodbye!")
                break

            if user_input.lower() == 'reset':
                session.close()
                session.open()
                continue

            session.handle_transcript(user_input)

            if controller.is_done():
                print("\nType 'reset' to start a new search, or 'quit' to exit.")

        except KeyboardInterrupt:
            print("\n\nGoodbye!")
            break


if __name__ == '__main__':
    main()
