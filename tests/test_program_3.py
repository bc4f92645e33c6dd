import builtins
from nextbasic.__main__ import main


def test_program_3_guessing_game(monkeypatch, capsys, example_path):
    """Test program 3: number guessing.

    The program keeps asking until the guess matches. We feed a high
    guess, a low guess and the right answer and check the hints.
    """
    guesses = iter(['50', '30', '42'])
    monkeypatch.setattr(builtins, 'input', lambda prompt='': next(guesses))
    status = main(['--throttle', '0', example_path('program_3.bas')])
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert status == 0
    assert out_lines == [
        'Guess a number', 'Too high',
        'Guess a number', 'Too low',
        'Guess a number', 'You got it!',
    ]
