"""``python -m rsvp_reader``: terminal reader by default, Tk window with ``--gui``.

Arguments other than ``--gui`` go to the terminal reader unchanged, for
example ``python -m rsvp_reader book.txt --wpm 350``. The window keeps
its state in the same file as the terminal reader (RSVP_STATE_PATH), so
a book started in one resumes in the other.
"""

import sys

if __name__ == "__main__":
    if "--gui" in sys.argv[1:]:
        from rsvp_reader.gui import main as gui_main
        gui_main()
    else:
        from rsvp_reader.cli import main
        main()
