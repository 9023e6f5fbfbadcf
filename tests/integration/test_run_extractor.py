"""
Integration tests for complete extraction runs
"""

import json
import logging
import os

import pytest

from keysync.services.extractor import run_extractor
from keysync.utils.validators import ExtractorError


APP_SOURCE = """
import { useTranslation, Trans } from 'react-i18next';

export function App() {
  const { t } = useTranslation();
  return (
    <div>
      <h1>{t('app.title', { defaultValue: 'Welcome!' })}</h1>
      <Trans i18nKey="app.description">
        This is a <code>description</code>.
      </Trans>
    </div>
  );
}
"""


class ResultRecorder:
    """Plugin keeping the results handed to after_sync"""
    name = 'recorder'
    results = None

    def after_sync(self, results, config):
        self.results = results


class TestRunExtractor:
    @pytest.mark.asyncio
    async def test_scenario_en_de(self, make_settings, project, read_catalog, tmp_path):
        project({'src/App.tsx': APP_SOURCE})

        updated = await run_extractor(make_settings(), cwd=str(tmp_path))

        assert updated is True
        assert read_catalog('locales/en/translation.json') == {
            'app': {'description': 'This is a <1>description</1>.', 'title': 'Welcome!'}
        }
        assert read_catalog('locales/de/translation.json') == {
            'app': {'description': '', 'title': ''}
        }

    @pytest.mark.asyncio
    async def test_second_run_is_idempotent(self, make_settings, project, tmp_path):
        project({
            'src/App.tsx': APP_SOURCE,
            'src/count.ts': "t('inbox', { count: n }); t('place', { count: 1, ordinal: true });",
        })
        settings = make_settings(locales=['en', 'de', 'ru'])

        assert await run_extractor(settings, cwd=str(tmp_path)) is True
        snapshot = {
            path: (tmp_path / path).read_bytes()
            for path in ('locales/en/translation.json', 'locales/de/translation.json', 'locales/ru/translation.json')
        }

        assert await run_extractor(settings, cwd=str(tmp_path)) is False
        for path, content in snapshot.items():
            assert (tmp_path / path).read_bytes() == content

    @pytest.mark.asyncio
    async def test_order_independence(self, make_settings, project, tmp_path):
        first = "t('zeta'); t('shared', 'From first');"
        second = "t('alpha'); t('shared.child');"
        project({
            'one/src/a.ts': first, 'one/src/b.ts': second,
            'two/src/a.ts': second, 'two/src/b.ts': first,
        })

        for name in ('one', 'two'):
            await run_extractor(make_settings(locales=['en']), cwd=str(tmp_path / name))

        one = (tmp_path / 'one/locales/en/translation.json').read_text(encoding='utf-8')
        two = (tmp_path / 'two/locales/en/translation.json').read_text(encoding='utf-8')
        assert one == two

    @pytest.mark.asyncio
    async def test_plural_coverage(self, make_settings, project, read_catalog, tmp_path):
        project({'src/list.ts': "t('item', { count: total });"})

        await run_extractor(make_settings(locales=['en', 'ru']), cwd=str(tmp_path))

        assert set(read_catalog('locales/en/translation.json')) == {'item_one', 'item_other'}
        assert set(read_catalog('locales/ru/translation.json')) == {'item_one', 'item_few', 'item_many', 'item_other'}

    @pytest.mark.asyncio
    async def test_existing_plural_translations_are_unchanged(self, make_settings, project, tmp_path):
        existing = {'key_one': 'ein Schlüssel', 'key_other': '{{count}} Schlüssel'}
        project({
            'src/a.ts': "t('key', { count: 5 });",
            'locales/de/translation.json': json.dumps(existing, indent=2, ensure_ascii=False) + '\n',
        })
        before = (tmp_path / 'locales/de/translation.json').read_bytes()
        recorder = ResultRecorder()

        await run_extractor(make_settings(plugins=[recorder]), cwd=str(tmp_path))

        de = next(result for result in recorder.results if result.locale == 'de')
        assert de.updated is False
        assert de.new_translations == existing
        assert (tmp_path / 'locales/de/translation.json').read_bytes() == before
        assert (tmp_path / 'locales/en/translation.json').exists()

    @pytest.mark.asyncio
    async def test_preserved_dynamic_keys(self, make_settings, project, read_catalog, tmp_path):
        project({
            'src/status.ts': "t(`dynamic.status.${status}`); t('dynamic.label');",
            'locales/en/translation.json': {
                'dynamic': {'label': 'Label', 'status': {'active': 'Active'}},
                'unused': 'Gone',
            },
        })
        settings = make_settings(locales=['en'], preserve_patterns=['dynamic.status.*'])

        await run_extractor(settings, cwd=str(tmp_path))

        assert read_catalog('locales/en/translation.json') == {
            'dynamic': {'label': 'Label', 'status': {'active': 'Active'}}
        }

    @pytest.mark.asyncio
    async def test_structural_refactor(self, make_settings, project, read_catalog, tmp_path):
        project({
            'src/person.ts': "t('person', 'A person');",
            'locales/en/translation.json': {'person': {'name': 'Name'}},
        })

        await run_extractor(make_settings(locales=['en']), cwd=str(tmp_path))

        assert read_catalog('locales/en/translation.json') == {'person': 'A person'}

    @pytest.mark.asyncio
    async def test_empty_key_does_not_suppress_siblings(self, make_settings, project, read_catalog, tmp_path):
        project({'src/a.ts': "t(''); t('  '); t('real.key', 'Real');"})

        await run_extractor(make_settings(locales=['en']), cwd=str(tmp_path))

        assert read_catalog('locales/en/translation.json') == {'real': {'key': 'Real'}}

    @pytest.mark.asyncio
    async def test_dry_run_writes_nothing(self, make_settings, project, tmp_path, caplog):
        project({'src/a.ts': "t('x');"})

        with caplog.at_level(logging.INFO):
            updated = await run_extractor(make_settings(), is_dry_run=True, cwd=str(tmp_path))

        assert updated is True
        assert not (tmp_path / 'locales').exists()
        assert "Would update:" in caplog.text

    @pytest.mark.asyncio
    async def test_parse_error_stops_before_writing(self, make_settings, project, tmp_path, caplog):
        project({
            'src/good.ts': "t('good');",
            'src/bad.ts': "t('bad'",
            'locales/en/translation.json': {'kept': 'Kept'},
        })

        with caplog.at_level(logging.ERROR):
            with pytest.raises(ExtractorError, match="bad.ts"):
                await run_extractor(make_settings(locales=['en']), cwd=str(tmp_path))

        assert 'bad.ts' in caplog.text
        assert '"kept"' in (tmp_path / 'locales/en/translation.json').read_text(encoding='utf-8')

    @pytest.mark.asyncio
    async def test_parse_error_still_reports_pending_catalogs(self, make_settings, project, tmp_path, caplog):
        project({
            'src/ok.ts': "t('good.key');",
            'src/bad.ts': "t('x'",
        })
        catalog = os.path.normpath(os.path.join(str(tmp_path), 'locales', 'en', 'translation.json'))

        with caplog.at_level(logging.INFO):
            with pytest.raises(ExtractorError, match=r"1 file\(s\) failed: .*bad\.ts"):
                await run_extractor(make_settings(locales=['en']), is_dry_run=True, cwd=str(tmp_path))

        assert f"Would update: {catalog}" in caplog.text
        assert "Found 1 keys in 2 files" in caplog.text
        assert not (tmp_path / 'locales').exists()

    @pytest.mark.asyncio
    async def test_invalid_configuration(self, make_settings, tmp_path):
        with pytest.raises(ExtractorError):
            await run_extractor(make_settings(output='locales/all.json'), cwd=str(tmp_path))

    @pytest.mark.asyncio
    async def test_sync_primary_and_sync_all(self, make_settings, project, read_catalog, tmp_path):
        project({
            'src/a.ts': "t('app.title', 'Primary Default');",
            'locales/en/translation.json': {'app': {'title': 'Old'}},
            'locales/de/translation.json': {'app': {'title': 'Alt'}},
        })

        await run_extractor(make_settings(), sync_primary_with_defaults=True, sync_all=True, cwd=str(tmp_path))

        assert read_catalog('locales/en/translation.json') == {'app': {'title': 'Primary Default'}}
        assert read_catalog('locales/de/translation.json') == {'app': {'title': ''}}


class TestNamespacesAndOutput:
    @pytest.mark.asyncio
    async def test_namespaces_get_separate_files(self, make_settings, project, read_catalog, tmp_path):
        project({'src/a.ts': "t('common:save', 'Save'); t('title', 'Title');"})

        await run_extractor(make_settings(locales=['en']), cwd=str(tmp_path))

        assert read_catalog('locales/en/common.json') == {'save': 'Save'}
        assert read_catalog('locales/en/translation.json') == {'title': 'Title'}

    @pytest.mark.asyncio
    async def test_ignore_namespaces(self, make_settings, project, read_catalog, tmp_path):
        project({
            'src/a.ts': "t('shared:button', 'Button'); t('own', 'Own');",
            'locales/en/shared.json': {'managed': 'elsewhere'},
        })
        settings = make_settings(locales=['en'], ignore_namespaces=['shared'])

        await run_extractor(settings, cwd=str(tmp_path))

        assert read_catalog('locales/en/shared.json') == {'managed': 'elsewhere'}
        assert read_catalog('locales/en/translation.json') == {'own': 'Own'}

    @pytest.mark.asyncio
    async def test_merge_namespaces(self, make_settings, project, read_catalog, tmp_path):
        project({'src/a.ts': "t('common:save', 'Save'); t('title', 'Title');"})
        settings = make_settings(locales=['en'], merge_namespaces=True)

        await run_extractor(settings, cwd=str(tmp_path))

        assert read_catalog('locales/en.json') == {'common': {'save': 'Save'}, 'translation': {'title': 'Title'}}

    @pytest.mark.asyncio
    async def test_template_without_namespace_merges(self, make_settings, project, read_catalog, tmp_path):
        project({'src/a.ts': "t('ns1:a', 'A'); t('b', 'B');"})
        settings = make_settings(locales=['en'], output='i18n/{{lng}}.json')

        await run_extractor(settings, cwd=str(tmp_path))

        assert read_catalog('i18n/en.json') == {'ns1': {'a': 'A'}, 'translation': {'b': 'B'}}

    @pytest.mark.asyncio
    async def test_sort_false_keeps_discovery_order(self, make_settings, project, tmp_path):
        project({'src/a.ts': "t('zebra', 'Z'); t('apple', 'A');"})

        await run_extractor(make_settings(locales=['en'], sort=False), cwd=str(tmp_path))

        content = (tmp_path / 'locales/en/translation.json').read_text(encoding='utf-8')
        assert content.index('zebra') < content.index('apple')

    @pytest.mark.asyncio
    async def test_output_function(self, make_settings, project, tmp_path):
        project({'src/a.ts': "t('a', 'A');"})
        settings = make_settings(locales=['en'], output=lambda lng, ns: f"out/{ns}-{lng}.json")

        await run_extractor(settings, cwd=str(tmp_path))

        assert os.path.exists(tmp_path / 'out' / 'translation-en.json')

    @pytest.mark.asyncio
    async def test_typescript_output(self, make_settings, project, tmp_path):
        project({'src/a.ts': "t('greeting', 'Hello');"})
        settings = make_settings(locales=['en'], output='locales/{{lng}}/{{ns}}.ts', output_format='ts')

        assert await run_extractor(settings, cwd=str(tmp_path)) is True
        content = (tmp_path / 'locales/en/translation.ts').read_text(encoding='utf-8')
        assert content == 'export default {\n  "greeting": "Hello"\n} as const;\n'
        assert await run_extractor(settings, cwd=str(tmp_path)) is False

    @pytest.mark.asyncio
    async def test_after_sync_receives_results(self, make_settings, project, tmp_path):
        recorder = ResultRecorder()
        project({'src/a.ts': "t('a');"})

        await run_extractor(make_settings(plugins=[recorder]), cwd=str(tmp_path))

        assert sorted(result.locale for result in recorder.results) == ['de', 'en']
