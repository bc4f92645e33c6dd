from nextbasic.interpreter import Interpreter
from nextbasic.session import Session


def make_session(inputs=()):
    out = []
    pending = list(inputs)
    session = Session(Interpreter(), output=out.append, input=lambda prompt: pending.pop(0))
    return session, out


def test_store_list_and_run():
    session, out = make_session()
    for line in ['20 PRINT "world"', '10 PRINT "hello"', 'LIST']:
        session.handle_line(line)
    assert out == ['  10 PRINT "hello"', '  20 PRINT "world"']
    out.clear()
    session.handle_line('run')
    assert out == ['hello', 'world', 'READY']


def test_replace_and_delete_lines():
    session, out = make_session()
    session.handle_line('10 PRINT 1')
    session.handle_line('20 PRINT 2')
    session.handle_line('10 PRINT 3')
    session.handle_line('20')
    assert session.lines == {10: 'PRINT 3'}


def test_new_clears_program():
    session, out = make_session()
    session.handle_line('10 A = 1')
    session.handle_line('RUN')
    session.handle_line('NEW')
    assert session.lines == {}
    assert 'A' not in session.interpreter.variables


def test_unknown_command():
    session, out = make_session()
    session.handle_line('HELLO')
    assert out == ['SYNTAX ERROR']


def test_exit_ends_session():
    session, out = make_session()
    assert session.handle_line('') is True
    assert session.handle_line('exit') is False
    assert session.active is False


def test_run_reports_errors_then_ready():
    session, out = make_session()
    session.handle_line('10 PRINT Z')
    session.handle_line('RUN')
    assert out == ['Error at line 10: Undefined variable: Z', 'READY']


def test_run_with_input():
    session, out = make_session(inputs=['7'])
    session.handle_line('10 INPUT "n"; N')
    session.handle_line('20 PRINT N * 6')
    session.handle_line('RUN')
    assert out == ['42', 'READY']


def test_stop_prints_message():
    session, out = make_session()
    session.stop()
    assert out == ['', '[Program stopped]', '']


def test_loop_reads_until_exit(monkeypatch, capsys):
    lines = iter(['10 PRINT "looped"', 'RUN', 'EXIT'])
    monkeypatch.setattr('builtins.input', lambda prompt='': next(lines))
    Session(Interpreter()).loop()
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines[0] == 'NEXTOS BASIC v0.1'
    assert out_lines[-2:] == ['looped', 'READY']


def test_loop_reads_command_lines_from_read_line():
    out = []
    lines = iter(['10 PRINT 6 * 7', 'RUN'])

    def read_line(prompt):
        try:
            return next(lines)
        except StopIteration:
            raise EOFError

    Session(Interpreter(), output=out.append, read_line=read_line).loop()
    assert out[-2:] == ['42', 'READY']
