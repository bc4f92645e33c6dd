from nextbasic.__main__ import main


def test_run_from_virtual_fs(capsys, example_path):
    status = main(['--throttle', '0', '--fs', example_path('fs.json'), '--cwd', '/home/guest', 'hello.bas'])
    assert status == 0
    assert capsys.readouterr().out.strip() == 'Hello from NextOS'


def test_missing_file_in_virtual_fs(capsys, example_path):
    status = main(['--fs', example_path('fs.json'), 'missing.bas'])
    assert status == 1
    assert capsys.readouterr().err.strip() == "run: 'missing.bas': No such file"


def test_directory_in_virtual_fs(capsys, example_path):
    status = main(['--fs', example_path('fs.json'), '/bin'])
    assert status == 1
    assert 'Not a text file' in capsys.readouterr().err


def test_missing_program_file(capsys, tmp_path):
    status = main([str(tmp_path / 'nope.bas')])
    assert status == 1
    assert 'No such file' in capsys.readouterr().err


def test_load_error_prevents_run(capsys, tmp_path):
    source = tmp_path / 'dup.bas'
    source.write_text('10 PRINT "a"\n10 PRINT "b"\n', encoding='utf-8')
    status = main([str(source)])
    captured = capsys.readouterr()
    assert status == 1
    assert captured.out == ''
    assert captured.err.strip() == 'Error: Duplicate line numbers: 10'


def test_runtime_error_sets_exit_status(capsys, tmp_path):
    source = tmp_path / 'err.bas'
    source.write_text('10 PRINT "start"\n20 GOTO 99\n', encoding='utf-8')
    status = main(['--throttle', '0', str(source)])
    assert status == 1
    assert capsys.readouterr().out.strip().split('\n') == ['start', 'Error at line 20: Line 99 does not exist']


def test_seed_makes_rnd_repeatable(capsys, tmp_path):
    source = tmp_path / 'dice.bas'
    source.write_text('10 FOR I = 1 TO 5\n20 PRINT INT(RND * 6) + 1\n30 NEXT I\n', encoding='utf-8')
    main(['--throttle', '0', '--seed', '3', str(source)])
    first = capsys.readouterr().out
    main(['--throttle', '0', '--seed', '3', str(source)])
    assert capsys.readouterr().out == first
