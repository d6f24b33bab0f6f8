import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from backend.expression import extract_rhs, fix_constants, normalize


class TestExtractRhs(unittest.TestCase):
    def test_function_form(self):
        self.assertEqual(extract_rhs("y(x) = c_1 e^x"), "c_1 e^x")

    def test_bare_name(self):
        self.assertEqual(extract_rhs("y = x^2 + c1"), "x^2 + c1")

    def test_text_after_last_equals(self):
        self.assertEqual(extract_rhs("y'(x) = 2 x"), "2 x")

    def test_no_equals_uses_whole_text(self):
        self.assertEqual(extract_rhs("sin(x)"), "sin(x)")

    def test_takes_last_of_several_solutions(self):
        self.assertEqual(extract_rhs("y(x) = -sqrt(x) and y(x) = sqrt(x)"), "sqrt(x)")

    def test_only_first_line(self):
        self.assertEqual(extract_rhs("y = x\n(assuming real x)"), "x")


class TestFixConstants(unittest.TestCase):
    def test_variants(self):
        self.assertEqual(fix_constants("c + c1 + c_2 + C"), ("1 + 1 + 1 + 1", True))

    def test_function_names_untouched(self):
        self.assertEqual(fix_constants("cos(x) + cosh(x)"), ("cos(x) + cosh(x)", False))


class TestNormalize(unittest.TestCase):
    def test_polynomial_with_constant(self):
        out = normalize("y = x^2 + c1")
        self.assertEqual(out.expression, "x**2 + 1")
        self.assertTrue(out.constants_fixed)

    def test_exponential_with_constant(self):
        out = normalize("y(x) = c_1 e^x")
        self.assertEqual(out.expression, "1*exp(x)")
        self.assertTrue(out.constants_fixed)

    def test_exponential_group(self):
        out = normalize("y(x) = e^(2 x)")
        self.assertEqual(out.expression, "exp(2*x)")
        self.assertFalse(out.constants_fixed)

    def test_digit_before_function_and_variable(self):
        self.assertEqual(normalize("3x + 2sin(x)").expression, "3*x + 2*sin(x)")

    def test_digit_before_group(self):
        self.assertEqual(normalize("y(x) = 1/2 (x^2 + 1)").expression, "1/2*(x**2 + 1)")

    def test_adjacent_groups(self):
        self.assertEqual(normalize("(x+1)(x-1)").expression, "(x+1)*(x-1)")

    def test_juxtaposed_variables(self):
        self.assertEqual(normalize("dy/dx = 2 x y").expression, "2*x*y")

    def test_missing_close_paren_appended(self):
        self.assertEqual(normalize("y = (x + 1").expression, "(x + 1)")
        self.assertEqual(normalize("y = sin((x").expression, "sin((x))")

    def test_surplus_close_paren_left_alone(self):
        self.assertEqual(normalize("y = x)").expression, "x)")

    def test_constant_after_coefficient(self):
        out = normalize("y = 3c + x")
        self.assertEqual(out.expression, "3*1 + x")
        self.assertTrue(out.constants_fixed)
        self.assertEqual(normalize("y = 2c_1 x").expression, "2*1*x")

    def test_constant_next_to_function(self):
        self.assertEqual(normalize("y = cos(x) + c").expression, "cos(x) + 1")

    def test_unicode_minus(self):
        self.assertEqual(normalize("y = x − 1").expression, "x - 1")

    def test_idempotent_on_evaluator_syntax(self):
        for expr in [
            "x**2 + 1",
            "exp(2*x) + 3*x**2",
            "1/2*(x**2 + 1)",
            "sin(x)*cos(x)",
            "sqrt(x) - E",
        ]:
            once = normalize(expr).expression
            self.assertEqual(once, expr)
            self.assertEqual(normalize(once).expression, once)

    def test_idempotent_after_first_pass(self):
        for text in ["y(x) = c_1 e^x", "y = 1/2 (x^2 + 2 c_1)", "y = (x + 1", "y = 3c + x"]:
            once = normalize(text).expression
            self.assertEqual(normalize(once).expression, once)


if __name__ == "__main__":
    unittest.main()
