import random

import pytest

from nextbasic.environment import Environment
from nextbasic.errors import BasicError
from nextbasic.evaluator import Evaluator


@pytest.fixture
def env():
    e = Environment()
    e.set('A', 5)
    e.set('b', 2)
    e.set('NAME', 'Ada')
    return e


@pytest.fixture
def evaluator():
    return Evaluator(random.Random(1))


def test_string_literal_is_returned_verbatim(evaluator, env):
    assert evaluator.evaluate('"hello, world"', env) == 'hello, world'


def test_number_literals(evaluator, env):
    assert evaluator.evaluate('42', env) == 42
    assert evaluator.evaluate(' -1.5 ', env) == -1.5
    assert evaluator.evaluate('.25', env) == 0.25


def test_precedence_and_parentheses(evaluator, env):
    assert evaluator.evaluate('2 + 3 * 4', env) == 14
    assert evaluator.evaluate('(2 + 3) * 4', env) == 20
    assert evaluator.evaluate('10 - 4 - 3', env) == 3
    assert evaluator.evaluate('-A + 1', env) == -4


def test_division_is_not_truncated(evaluator, env):
    assert evaluator.evaluate('7 / 2', env) == 3.5


def test_variables_are_case_insensitive(evaluator, env):
    assert evaluator.evaluate('a * B', env) == 10


def test_int_floors(evaluator, env):
    assert evaluator.evaluate('INT(7 / 2)', env) == 3
    assert evaluator.evaluate('int(-2.5)', env) == -3


def test_rnd_is_in_unit_interval(evaluator, env):
    for _ in range(20):
        value = evaluator.evaluate('RND', env)
        assert 0 <= value < 1


def test_rnd_scaled_with_int(evaluator, env):
    for _ in range(20):
        assert evaluator.evaluate('INT(RND * 6) + 1', env) in range(1, 7)


def test_rnd_is_reproducible_with_seed(env):
    first = Evaluator(random.Random(7)).evaluate('RND', env)
    second = Evaluator(random.Random(7)).evaluate('RND()', env)
    assert first == second


def test_string_concatenation(evaluator, env):
    assert evaluator.evaluate('"Hi " + NAME', env) == 'Hi Ada'
    assert evaluator.evaluate('NAME + A', env) == 'Ada5'


def test_undefined_variable_is_an_error(evaluator, env):
    with pytest.raises(BasicError) as exc_info:
        evaluator.evaluate('A + Y', env)
    assert exc_info.value.name == 'UndefinedVariable'
    assert 'Y' in exc_info.value.message


def test_malformed_expression(evaluator, env):
    with pytest.raises(BasicError) as exc_info:
        evaluator.evaluate('A + * 2', env)
    assert exc_info.value.name == 'CannotEvaluateExpression'
    assert 'A + * 2' in exc_info.value.message


def test_arithmetic_on_strings_is_rejected(evaluator, env):
    with pytest.raises(BasicError) as exc_info:
        evaluator.evaluate('NAME * 2', env)
    assert exc_info.value.name == 'CannotEvaluateExpression'


def test_unknown_function(evaluator, env):
    with pytest.raises(BasicError) as exc_info:
        evaluator.evaluate('SQR(4)', env)
    assert exc_info.value.name == 'CannotEvaluateExpression'


def test_division_by_zero(evaluator, env):
    with pytest.raises(BasicError) as exc_info:
        evaluator.evaluate('A / 0', env)
    assert exc_info.value.name == 'DivisionByZero'


def test_print_part_falls_back_to_literal_text(evaluator, env):
    assert evaluator.evaluate_print_part('"A=" A', env) == 'A= 5'


def test_print_part_bare_undefined_variable(evaluator, env):
    with pytest.raises(BasicError) as exc_info:
        evaluator.evaluate_print_part('Q', env)
    assert exc_info.value.name == 'UndefinedVariable'


def test_print_part_fallback_leaves_unbound_names_blank(evaluator, env):
    assert evaluator.evaluate_print_part('"Q=" Q', env) == 'Q= '


def test_numbers_are_doubles(evaluator, env):
    assert isinstance(evaluator.evaluate('42', env), float)
    assert isinstance(evaluator.evaluate('INT(7 / 2)', env), float)
    assert isinstance(evaluator.evaluate('(A > 1) + 1', env), float)
    assert evaluator.evaluate('9007199254740993', env) == 9007199254740992.0


def test_multiplication_overflows_to_infinity(evaluator, env):
    assert evaluator.evaluate('1E300 * 1E300', env) == float('inf')
    assert evaluator.evaluate('INT(1E300 * 1E300)', env) == float('inf')


def test_condition_on_infinite_variable(evaluator):
    e = Environment()
    e.set('X', float('inf'))
    e.set('Y', float('-inf'))
    assert evaluator.evaluate_condition('X > 0', e) is True
    assert evaluator.evaluate_condition('Y < 0 AND X > Y', e) is True


def test_oversized_integer_cannot_be_stored():
    with pytest.raises(BasicError) as exc_info:
        Environment().set('X', 10 ** 400)
    assert exc_info.value.name == 'CannotEvaluateExpression'
