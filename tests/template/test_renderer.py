"""
Тесты для рендерера шаблонов.

Проверяют разрешение имён через стек контекста, экранирование,
истинность секций, итерацию списков и рендеринг партиалов.
"""

import pytest

from stache.errors import TemplateNotFoundError
from stache.template import Template, compile_template, render, resolver_from
from stache.template.renderer import escape_html, indent_lines, is_truthy, stringify


def _render(source, value, partials=None):
    return Template.parse(source).render(value, partials)


class TestVariables:
    """Тесты для переменных."""

    def test_simple_variable(self):
        """Подстановка значения по имени."""
        assert _render("Hello {{name}}!", {"name": "World"}) == "Hello World!"

    def test_escaping(self):
        """{{v}} экранирует & < > \" '."""
        value = {"v": "<a>&\"'"}

        assert _render("{{v}}", value) == "&lt;a&gt;&amp;&quot;&#39;"

    @pytest.mark.parametrize("source", ["{{{v}}}", "{{&v}}", "{{{ v }}}"])
    def test_unescaped(self, source):
        """Неэкранируемые переменные выводят значение как есть."""
        assert _render(source, {"v": "<a>&\"'"}) == "<a>&\"'"

    def test_missing_variable_is_empty(self):
        """Отсутствующая переменная даёт пустую строку, а не ошибку."""
        assert _render("[{{nope}}]", {"name": "x"}) == "[]"

    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        (True, "true"),
        (False, "false"),
        (42, "42"),
        (-7, "-7"),
        (1.5, "1.5"),
        (0.1, "0.1"),
        (1e20, "1e20"),
        (1e-7, "1e-7"),
        (-2.5e-10, "-2.5e-10"),
        (1.0, "1.0"),
        ("text", "text"),
        ([1, 2], ""),
        ({"a": 1}, ""),
    ])
    def test_stringification(self, value, expected):
        """Преобразование скаляров в строку."""
        assert _render("{{v}}", {"v": value}) == expected

    def test_dotted_name(self):
        """Точечное имя спускается внутрь словарей."""
        value = {"a": {"b": {"c": "deep"}}}

        assert _render("{{a.b.c}}", value) == "deep"

    def test_list_index_segment(self):
        """Числовой сегмент индексирует список."""
        value = {"items": [{"name": "x"}, {"name": "y"}]}

        assert _render("{{items.1.name}}|{{items.5.name}}", value) == "y|"

    def test_pure_text_round_trip(self):
        """Текст без тегов выводится без изменений."""
        source = "plain } text }} with {braces}\n  and lines\r\n"

        assert _render(source, {}) == source

    def test_root_scalar_with_implicit_iterator(self):
        """Корневое значение может быть скаляром."""
        assert _render("{{.}}", "root") == "root"


class TestContextLookup:
    """Тесты для поиска имён по стеку контекста."""

    def test_outward_search(self):
        """Имя, отсутствующее во внутреннем кадре, берётся из внешнего."""
        source = "{{#outer}}{{#inner}}{{key}}/{{x}}{{/inner}}{{/outer}}"
        value = {"outer": {"key": "O", "inner": {"x": 1}}}

        assert _render(source, value) == "O/1"

    def test_inner_frame_shadows_outer(self):
        """Внутренний кадр имеет приоритет."""
        value = {"name": "outer", "child": {"name": "inner"}}

        assert _render("{{#child}}{{name}}{{/child}} {{name}}", value) == "inner outer"

    def test_partial_path_failure_continues_outward(self):
        """Если путь разрешился не до конца, поиск продолжается во внешнем кадре."""
        value = {"a": {"b": {}}, "b": {"c": "outer"}}

        assert _render("{{#a}}{{b.c}}{{/a}}", value) == "outer"

    def test_scalar_frame_falls_through(self):
        """Скалярный кадр не разрешает имена, поиск идёт наружу."""
        value = {"flag": True, "name": "root"}

        assert _render("{{#flag}}{{name}}{{/flag}}", value) == "root"


class TestSections:
    """Тесты для секций и инвертированных секций."""

    @pytest.mark.parametrize("items,expected", [
        ([1, 2, 3], "XXX"),
        ([], ""),
        ({"a": 1}, "X"),
        ({}, "X"),
        ("str", "X"),
    ])
    def test_repetition_count(self, items, expected):
        """Список повторяет тело по числу элементов, остальные истинные значения один раз."""
        assert _render("{{#items}}X{{/items}}", {"items": items}) == expected

    def test_list_elements_become_context(self):
        """Элемент списка становится верхним кадром."""
        value = {"items": [1, "a", True, None]}

        assert _render("{{#items}}{{.}},{{/items}}", value) == "1,a,true,,"

    def test_list_of_maps(self):
        """Итерация по списку словарей."""
        value = {"people": [{"name": "Ann"}, {"name": "Bob"}]}

        assert _render("{{#people}}<{{name}}>{{/people}}", value) == "<Ann><Bob>"

    @pytest.mark.parametrize("value", [
        None, False, True, 0, 1, 0.0, 2.5, "", "x", [], [0], {}, {"a": 1},
    ])
    def test_inverted_complementarity(self, value):
        """Ровно одна из секций {{#s}} и {{^s}} рендерит тело."""
        normal = _render("{{#s}}B{{/s}}", {"s": value})
        inverted = _render("{{^s}}B{{/s}}", {"s": value})

        assert (normal == "B") != (inverted == "B")

    def test_inverted_section_for_missing_name(self):
        """Отсутствующее имя: инвертированная секция рендерится."""
        assert _render("{{^nope}}empty{{/nope}}", {}) == "empty"

    def test_inverted_section_does_not_push(self):
        """Инвертированная секция не добавляет кадр: . остаётся прежним."""
        assert _render("{{^missing}}{{.}}{{/missing}}", "root") == "root"

    def test_standalone_section_lines(self):
        """Standalone-теги секций не оставляют пустых строк."""
        source = "<ul>\n{{#items}}\n  <li>{{.}}</li>\n{{/items}}\n</ul>\n"

        assert _render(source, {"items": ["a", "b"]}) == "<ul>\n  <li>a</li>\n  <li>b</li>\n</ul>\n"

    def test_comment_removed(self):
        """Комментарии не выводятся, standalone-комментарий удаляет свою строку."""
        assert _render("a{{! inline }}b\n{{! own line }}\nc", {}) == "ab\nc"


class TestPartials:
    """Тесты для партиалов."""

    def test_partial_inclusion(self):
        """Партиал рендерится с тем же корневым значением."""
        assert _render("{{>child}}", {"name": "Sam"}, {"child": "hi {{name}}"}) == "hi Sam"

    def test_partial_inherits_context_stack(self):
        """Партиал видит текущий стек контекста, а не только корень."""
        value = {"user": {"name": "Ann"}, "site": "S"}

        assert _render("{{#user}}{{>card}}{{/user}}", value, {"card": "{{name}}@{{site}}"}) == "Ann@S"

    def test_partial_with_compiled_template(self):
        """В отображении партиалов можно передавать скомпилированные шаблоны."""
        partials = {"child": compile_template("[{{.}}]", "child")}

        assert _render("{{#xs}}{{>child}}{{/xs}}", {"xs": [1, 2]}, partials) == "[1][2]"

    def test_partial_callable_resolver(self):
        """Партиалы можно разрешать функцией."""
        child = compile_template("ok")

        assert _render("{{>any}}", {}, lambda name: child) == "ok"

    def test_standalone_partial_indentation(self):
        """Отступ standalone-партиала добавляется к каждой его строке."""
        source = "<ul>\n  {{>item}}\n</ul>"
        partials = {"item": "<li>a</li>\n<li>b</li>\n"}

        assert _render(source, {}, partials) == "<ul>\n  <li>a</li>\n  <li>b</li>\n</ul>"

    def test_recursive_partial_terminates_on_data(self):
        """Рекурсивный партиал останавливается, когда данные кончаются."""
        partials = {"node": "{{name}}{{#children}}[{{>node}}]{{/children}}"}
        value = {"name": "a", "children": [{"name": "b", "children": []}, {"name": "c", "children": []}]}

        assert _render("{{>node}}", value, partials) == "a[b][c]"

    @pytest.mark.parametrize("partials", [None, {}, lambda name: None])
    def test_missing_partial_is_error(self, partials):
        """Неизвестный партиал: ошибка рендеринга, а не пустая строка."""
        with pytest.raises(TemplateNotFoundError) as exc_info:
            _render("x{{>ghost}}y", {}, partials)

        assert exc_info.value.name == "ghost"
        assert str(exc_info.value) == "loader error: 'ghost' template not found"

    def test_self_including_partial_recurses_without_bound(self):
        """Самовключающийся партиал приводит к RecursionError."""
        with pytest.raises(RecursionError):
            _render("{{>loop}}", {}, {"loop": "x{{>loop}}"})


class TestRenderHelpers:
    """Тесты для вспомогательных функций рендерера."""

    def test_escape_html_ampersand_once(self):
        """& экранируется один раз, уже экранированные сущности не трогаются повторно."""
        assert escape_html("&lt;") == "&amp;lt;"

    def test_stringify_missing(self):
        """None даёт пустую строку."""
        assert stringify(None) == ""

    @pytest.mark.parametrize("value,expected", [
        (0, False), (0.0, False), ("", False), ([], False), ({}, True), ("0", True), (-1, True),
    ])
    def test_is_truthy(self, value, expected):
        """Правила истинности значений."""
        assert is_truthy(value) is expected

    @pytest.mark.parametrize("text,expected", [
        ("a\nb\n", "> a\n> b\n"),
        ("a\nb", "> a\n> b"),
        ("a\n\nb\n", "> a\n> \n> b\n"),
        ("", ""),
    ])
    def test_indent_lines(self, text, expected):
        """Отступ добавляется к каждой строке, кроме пустого хвоста."""
        assert indent_lines(text, "> ") == expected

    def test_render_function_without_resolver(self):
        """render() без резолвера работает для шаблонов без партиалов."""
        assert render(compile_template("{{x}}"), {"x": 1}) == "1"

    def test_resolver_from_mapping_compiles_with_name(self):
        """Текст партиала компилируется с его именем."""
        resolver = resolver_from({"child": "x"})

        assert resolver("child").name == "child"
