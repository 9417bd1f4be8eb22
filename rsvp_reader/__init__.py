"""RSVP Reader — read text one word at a time at a controlled pace.

WHY: Rapid Serial Visual Presentation shows each word in the same spot
for a computed duration, removing eye movement from reading. Doing it
well needs careful timing (longer words and sentence ends stay longer),
a drift-free playback loop and honest reading statistics.

HOW: Three layers — the core engine (timing model, tokenizer, playback
scheduler, session accounting), pluggable persistence (storage), and
thin front ends (terminal CLI, Tk window, HTTP API) that render the
current word and forward user actions.

RULES:
- The core never does I/O; clocks and stores are injected
- Front ends talk to the engine through ReaderController
- Nothing in the engine crashes on bad settings or a failing store
"""

__version__ = "0.1.0"
