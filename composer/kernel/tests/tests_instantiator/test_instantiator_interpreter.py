"""
Composer Kernel -- Sandbox Interpreter Tests

The subset of JavaScript that component authors actually write: closures,
destructuring, array and string methods, control flow, and the React hooks
a static preview supports. Each test renders a tiny component and compares
the serialized markup.
"""

import logging

import pytest

from composer.kernel.errors import BudgetExceeded, RuntimeFailure
from composer.kernel.interpreter import Interpreter
from composer.kernel.nodes import activate, iter_nodes, to_html
from composer.kernel.preprocess import preprocess_source
from composer.kernel.tsx_parser import parse_program


def render_html(body, properties=None, max_steps=200_000):
    """Render `export default function C() { <body> }` and return its markup."""
    prepared = preprocess_source("export default function C() {\n" + body + "\n}")
    interpreter = Interpreter(parse_program(prepared.code), properties, max_steps=max_steps)
    return to_html(interpreter.render(prepared.component_name))


def render_nodes(source, navigate=None):
    prepared = preprocess_source(source)
    interpreter = Interpreter(parse_program(prepared.code), navigate=navigate)
    return interpreter.render(prepared.component_name)


# ============================================================================
# Expressions
# ============================================================================


class TestExpressions:
    def test_template_literal(self):
        """Template literals interpolate expressions."""
        assert render_html("const n = 2; return <p>{`${n + 1} items`}</p>;") == "<p>3 items</p>"

    def test_string_concatenation_with_numbers(self):
        """`+` concatenates when either side is a string."""
        assert render_html("return <p>{'a' + 1 + 2}</p>;") == "<p>a12</p>"

    def test_division_produces_float(self):
        """Numbers format the way the browser prints them."""
        assert render_html("return <p>{7 / 2} {6 / 2}</p>;") == "<p>3.5 3</p>"

    def test_logical_and_ternary(self):
        """&& and ternaries drive conditional rendering."""
        body = "const show = false; return <div>{show && <b>no</b>}{!show ? <i>yes</i> : null}</div>;"
        assert render_html(body) == "<div><i>yes</i></div>"

    def test_nullish_and_optional_chaining(self):
        """?. short-circuits and ?? picks the fallback."""
        body = "const user = null; return <p>{user?.profile?.name ?? 'Guest'}</p>;"
        assert render_html(body) == "<p>Guest</p>"

    def test_strict_and_loose_equality(self):
        body = "return <p>{String(1 == '1')} {String(1 === '1')} {String(null == undefined)}</p>;"
        assert render_html(body) == "<p>true false true</p>"

    def test_typeof(self):
        body = "return <p>{typeof 1} {typeof 'a'} {typeof undefined} {typeof (() => 1)}</p>;"
        assert render_html(body) == "<p>number string undefined function</p>"


# ============================================================================
# Functions and destructuring
# ============================================================================


class TestFunctions:
    def test_closures_capture_scope(self):
        body = "const make = (k) => (x) => x * k; const triple = make(3); return <p>{triple(4)}</p>;"
        assert render_html(body) == "<p>12</p>"

    def test_object_and_array_destructuring(self):
        body = (
            "const { a, b: { c }, ...rest } = { a: 1, b: { c: 2 }, d: 3, e: 4 };"
            "const [first, , third = 9] = [5, 6];"
            "return <p>{a}-{c}-{Object.keys(rest).join(',')}-{first}-{third}</p>;"
        )
        assert render_html(body) == "<p>1-2-d,e-5-9</p>"

    def test_spread_in_arrays_objects_and_calls(self):
        body = (
            "const xs = [1, 2]; const o = { ...{ a: 1 }, b: 2 };"
            "return <p>{[...xs, 3].length} {Object.keys(o).join('')} {Math.max(...xs)}</p>;"
        )
        assert render_html(body) == "<p>3 ab 2</p>"

    def test_default_parameters(self):
        body = "function greet(name = 'you') { return 'hi ' + name; } return <p>{greet()}</p>;"
        assert render_html(body) == "<p>hi you</p>"

    def test_spread_props_on_elements(self):
        body = "const extra = { id: 'x', title: 't' }; return <div {...extra} className='k' />;"
        assert render_html(body) == '<div id="x" title="t" class="k"></div>'


# ============================================================================
# Builtins
# ============================================================================


class TestBuiltins:
    def test_array_pipeline(self):
        body = (
            "const items = [{ n: 'a', on: true }, { n: 'b', on: false }, { n: 'c', on: true }];"
            "return <p>{items.filter(i => i.on).map(i => i.n.toUpperCase()).join(', ')}</p>;"
        )
        assert render_html(body) == "<p>A, C</p>"

    def test_reduce_and_find(self):
        body = (
            "const xs = [1, 2, 3, 4];"
            "return <p>{xs.reduce((s, x) => s + x, 0)} {xs.find(x => x > 2)} {xs.indexOf(9)}</p>;"
        )
        assert render_html(body) == "<p>10 3 -1</p>"

    def test_string_methods(self):
        body = "const s = '  Hello World  '; return <p>{s.trim().split(' ').reverse().join('|')}</p>;"
        assert render_html(body) == "<p>World|Hello</p>"

    def test_number_formatting(self):
        body = "return <p>{(3.14159).toFixed(2)} {parseInt('42px')} {Math.round(2.5)}</p>;"
        assert render_html(body) == "<p>3.14 42 3</p>"

    def test_number_literal_forms(self):
        """Leading-zero literals are octal only when every digit is below 8."""
        body = "return <p>{09} {08} {017} {0o17} {0x1F} {0b101} {1_000} {10n}</p>;"
        assert render_html(body) == "<p>9 8 15 15 31 5 1000 10</p>"

    def test_to_string_radix(self):
        body = "return <p>{(255).toString(16)} {(5).toString(2)} {(-10).toString(36)}</p>;"
        assert render_html(body) == "<p>ff 101 -a</p>"

    @pytest.mark.parametrize("radix", [0, 1, 37])
    def test_to_string_radix_out_of_range(self, radix):
        """A radix outside 2..36 is a RangeError, not a hang."""
        with pytest.raises(RuntimeFailure, match="radix"):
            render_html(f"return <p>{{(5).toString({radix})}}</p>;")

    def test_json_round_trip(self):
        body = "const o = JSON.parse('{\"a\": [1, 2]}'); return <p>{JSON.stringify(o)}</p>;"
        assert render_html(body) == '<p>{"a":[1,2]}</p>'

    def test_regex_test_and_replace(self):
        body = "return <p>{String(/^h/i.test('Hello'))} {'a-b-c'.replace(/-/g, '+')}</p>;"
        assert render_html(body) == "<p>true a+b+c</p>"

    def test_console_is_routed_to_logging(self, caplog):
        """console.log writes to the sandbox console logger instead of stdout."""
        with caplog.at_level(logging.INFO, logger="composer.sandbox.console"):
            render_html("console.log('hello', 1); return null;")
        assert "hello 1" in caplog.text


# ============================================================================
# Statements
# ============================================================================


class TestStatements:
    def test_for_loop_with_break_and_continue(self):
        body = (
            "const out = [];"
            "for (let i = 0; i < 10; i++) { if (i % 2) continue; if (i > 6) break; out.push(i); }"
            "return <p>{out.join(',')}</p>;"
        )
        assert render_html(body) == "<p>0,2,4,6</p>"

    def test_for_of_and_for_in(self):
        body = (
            "let s = ''; for (const x of ['a', 'b']) { s += x; }"
            "for (const k in { p: 1, q: 2 }) { s += k; }"
            "return <p>{s}</p>;"
        )
        assert render_html(body) == "<p>abpq</p>"

    def test_while_and_do_while(self):
        body = "let i = 0; while (i < 3) { i++; } do { i += 10; } while (false); return <p>{i}</p>;"
        assert render_html(body) == "<p>13</p>"

    def test_switch_fallthrough(self):
        body = (
            "let s = ''; switch (2) { case 1: s += 'a'; case 2: s += 'b'; case 3: s += 'c'; break; default: s += 'd'; }"
            "return <p>{s}</p>;"
        )
        assert render_html(body) == "<p>bc</p>"

    def test_try_catch_finally(self):
        body = (
            "let s = '';"
            "try { throw new Error('bad'); } catch (e) { s += e.message; } finally { s += '!'; }"
            "return <p>{s}</p>;"
        )
        assert render_html(body) == "<p>bad!</p>"

    def test_const_reassignment_fails(self):
        with pytest.raises(RuntimeFailure):
            render_html("const x = 1; x = 2; return null;")

    def test_uncaught_throw(self):
        with pytest.raises(RuntimeFailure) as info:
            render_html("throw new Error('kaboom');")
        assert "kaboom" in info.value.message


# ============================================================================
# Hooks and budget
# ============================================================================


class TestHooks:
    def test_use_state_returns_initial_value(self):
        body = "const [count, setCount] = React.useState(5); setCount(6); return <p>{count}</p>;"
        assert render_html(body) == "<p>5</p>"

    def test_lazy_initial_state(self):
        body = "const [v] = useState(() => 'lazy'); return <p>{v}</p>;"
        assert render_html(body) == "<p>lazy</p>"

    def test_effects_are_not_run(self):
        body = "let ran = false; useEffect(() => { ran = true; }, []); return <p>{String(ran)}</p>;"
        assert render_html(body) == "<p>false</p>"

    def test_use_memo_and_ref(self):
        body = "const v = useMemo(() => 2 * 21, []); const r = useRef(null); return <p>{v}{String(r.current)}</p>;"
        assert render_html(body) == "<p>42null</p>"


class TestBudget:
    def test_step_budget_raises(self):
        with pytest.raises(BudgetExceeded):
            render_html("for (;;) {}", max_steps=200)

    def test_budget_is_a_runtime_failure(self):
        """Budget exhaustion is handled wherever runtime failures are."""
        assert issubclass(BudgetExceeded, RuntimeFailure)


# ============================================================================
# Async
# ============================================================================


class TestAsync:
    def test_async_handler_renders(self):
        """An async click handler is just another prop at render time."""
        body = "const onClick = async () => { await Promise.resolve(1); }; return <p onClick={onClick}>ok</p>;"
        assert render_html(body) == "<p>ok</p>"

    def test_await_in_handler(self):
        visited = []
        source = (
            "export default function Save() {\n"
            "  const save = async () => { const path = await Promise.resolve('/saved'); navigate(path); };\n"
            "  return <button onClick={save}>Save</button>;\n"
            "}"
        )
        (button,) = iter_nodes(render_nodes(source, navigate=visited.append))
        activate(button)
        assert visited == ["/saved"]

    def test_await_constructed_promise(self):
        visited = []
        source = (
            "export default function Load() {\n"
            "  const load = async () => {\n"
            "    const v = await new Promise((resolve) => resolve(4));\n"
            "    navigate('/n/' + v * 2);\n"
            "  };\n"
            "  return <button onClick={load}>Load</button>;\n"
            "}"
        )
        (button,) = iter_nodes(render_nodes(source, navigate=visited.append))
        activate(button)
        assert visited == ["/n/8"]

    def test_rejection_is_caught_by_try(self):
        """Awaiting a rejected promise throws into the surrounding try."""
        visited = []
        source = (
            "export default function Run() {\n"
            "  const run = async () => {\n"
            "    try { await Promise.reject(new Error('nope')); } catch (e) { navigate(e.message); }\n"
            "  };\n"
            "  return <button onClick={run}>Run</button>;\n"
            "}"
        )
        (button,) = iter_nodes(render_nodes(source, navigate=visited.append))
        activate(button)
        assert visited == ["nope"]

    def test_then_chain(self):
        visited = []
        source = (
            "export default function Chain() {\n"
            "  const go = () => Promise.resolve(2).then((x) => x * 3).then((v) => navigate('/n/' + v));\n"
            "  return <button onClick={go}>Go</button>;\n"
            "}"
        )
        (button,) = iter_nodes(render_nodes(source, navigate=visited.append))
        activate(button)
        assert visited == ["/n/6"]

    def test_unhandled_rejection_is_logged(self, caplog):
        """A handler whose promise rejects logs a warning instead of raising."""
        source = (
            "export default function Fail() {\n"
            "  const fail = async () => { throw new Error('late'); };\n"
            "  return <button onClick={fail}>Fail</button>;\n"
            "}"
        )
        (button,) = iter_nodes(render_nodes(source))
        with caplog.at_level(logging.WARNING, logger="composer.kernel.interpreter"):
            activate(button)
        assert "late" in caplog.text

    def test_async_component_is_not_renderable(self):
        """A component must return markup synchronously."""
        with pytest.raises(RuntimeFailure, match="not valid as a child"):
            render_nodes("export default async function Slow() { return <p>x</p>; }")
