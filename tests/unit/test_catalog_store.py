import logging

import pytest

from keysync.services.catalog_store import CatalogStore


class TestSerialize:
    def test_json(self):
        store = CatalogStore('json', 2)
        assert store.serialize({'a': {'b': 'ü'}}) == '{\n  "a": {\n    "b": "ü"\n  }\n}\n'

    @pytest.mark.parametrize("output_format,start,end", [
        ('js', 'export default {', '};\n'),
        ('js-esm', 'export default {', '};\n'),
        ('js-cjs', 'module.exports = {', '};\n'),
        ('ts', 'export default {', '} as const;\n'),
    ])
    def test_module_formats(self, output_format, start, end):
        text = CatalogStore(output_format, 2).serialize({'title': 'Hi'})
        assert text.startswith(start)
        assert text.endswith(end)

    def test_string_indentation(self):
        assert CatalogStore('json', '\t').serialize({'a': 'b'}) == '{\n\t"a": "b"\n}\n'

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            CatalogStore('yaml')


class TestReadWrite:
    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        assert await CatalogStore().read(str(tmp_path / 'nope.json')) is None

    @pytest.mark.asyncio
    async def test_write_creates_directories(self, tmp_path):
        store = CatalogStore('json', 2)
        path = str(tmp_path / 'locales' / 'en' / 'translation.json')
        await store.write(path, {'hello': 'world'})
        assert await store.read(path) == {'hello': 'world'}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("output_format,extension", [
        ('js', 'js'), ('js-cjs', 'js'), ('ts', 'ts'),
    ])
    async def test_module_round_trip(self, tmp_path, output_format, extension):
        store = CatalogStore(output_format, 2)
        tree = {'app': {'title': 'Quote " and \\ backslash', 'count': 3}, 'list': ['a', 'b'], 'flag': True}
        path = str(tmp_path / f"en.{extension}")
        await store.write(path, tree)
        assert await store.read(path) == tree

    @pytest.mark.asyncio
    async def test_malformed_json_is_ignored(self, tmp_path, caplog):
        path = tmp_path / 'broken.json'
        path.write_text('{"a": ', encoding='utf-8')
        with caplog.at_level(logging.WARNING):
            assert await CatalogStore().read(str(path)) is None
        assert "Ignoring malformed catalog" in caplog.text

    @pytest.mark.asyncio
    async def test_non_object_json_is_ignored(self, tmp_path):
        path = tmp_path / 'list.json'
        path.write_text('["a"]', encoding='utf-8')
        assert await CatalogStore().read(str(path)) is None
