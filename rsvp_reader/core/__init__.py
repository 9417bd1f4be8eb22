"""Reading engine core: timing model, tokenizer, scheduler, session accounting.

WHY: All of the reader's temporal logic lives here, independent of any
window, terminal or web page. Front ends only render the current unit
and forward user actions.

HOW: units.py defines the data model, timing.py and tokenizer.py turn
text into timed units, scheduler.py plays them back against an
injected frame clock, session.py and statistics.py turn play/pause
activity into reading statistics.

RULES:
- No module here performs I/O; storage and clocks are injected
- The unit sequence is owned by the scheduler and replaced as a whole
"""
