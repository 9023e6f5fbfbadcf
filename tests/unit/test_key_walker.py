"""
Tests for translation call extraction, scopes and expression resolution
"""

import logging

import pytest

from keysync.config.settings import UseTranslationHook


class TestBasicCalls:
    def test_plain_calls(self, extract_keys):
        keys = extract_keys("""
            t('app.title');
            i18n.t('app.subtitle');
        """)
        assert set(keys) == {'translation:app.title', 'translation:app.subtitle'}
        title = keys['translation:app.title']
        assert title.default_value == 'app.title'
        assert not title.explicit_default
        assert title.locations[0].line == 2

    def test_unknown_functions_are_ignored(self, extract_keys):
        keys = extract_keys("translate('nope'); console.log('also not')")
        assert keys == {}

    def test_string_default(self, extract_keys):
        keys = extract_keys("t('greeting', 'Hello there')")
        key = keys['translation:greeting']
        assert key.default_value == 'Hello there'
        assert key.explicit_default

    def test_default_value_option(self, extract_keys):
        keys = extract_keys("t('greeting', { defaultValue: 'Hi {{name}}', name })")
        assert keys['translation:greeting'].default_value == 'Hi {{name}}'

    def test_empty_keys_are_skipped(self, extract_keys):
        keys = extract_keys("""
            t('');
            t('   ');
            t('kept');
        """)
        assert list(keys) == ['translation:kept']

    def test_array_keys_only_last_gets_default(self, extract_keys):
        keys = extract_keys("t(['errors.specific', 'errors.generic'], 'Something failed')")
        assert keys['translation:errors.specific'].default_value == 'errors.specific'
        assert keys['translation:errors.generic'].default_value == 'Something failed'

    def test_last_explicit_default_wins(self, extract_keys):
        keys = extract_keys("""
            t('save', 'Save');
            t('save');
            t('save', 'Save now');
        """)
        assert keys['translation:save'].default_value == 'Save now'
        assert len(keys['translation:save'].locations) == 3

    def test_this_member_callee(self, extract_keys):
        keys = extract_keys("""
            class Profile extends Component {
              render() {
                return this.props.t('profile.name');
              }
            }
        """)
        assert 'translation:profile.name' in keys

    def test_calls_inside_array_and_object_literals(self, extract_keys):
        keys = extract_keys("""
            const tabs = [t('tabs.home'), t('tabs.about')];
            const labels = { save: t('actions.save'), nested: { cancel: t('actions.cancel') } };
        """)
        assert set(keys) == {
            'translation:tabs.home', 'translation:tabs.about',
            'translation:actions.save', 'translation:actions.cancel'
        }


class TestNamespaces:
    def test_namespace_prefix_in_key(self, extract_keys):
        keys = extract_keys("t('common:buttons.save')")
        key = keys['common:buttons.save']
        assert key.key == 'buttons.save'
        assert key.namespace == 'common'
        assert key.default_value == 'common:buttons.save'

    def test_ns_option_wins_over_prefix(self, extract_keys):
        keys = extract_keys("t('common:title', { ns: 'admin' })")
        assert 'admin:common:title' in keys

    def test_namespace_separator_disabled(self, make_settings, extract_keys):
        settings = make_settings(ns_separator=False)
        keys = extract_keys("t('Note: read this')", settings=settings)
        assert 'translation:Note: read this' in keys

    def test_empty_key_after_namespace(self, extract_keys, caplog):
        with caplog.at_level(logging.WARNING):
            keys = extract_keys("t('common:')")
        assert keys == {}
        assert "empty after namespace removal" in caplog.text


class TestScopes:
    def test_use_translation_namespace(self, extract_keys):
        keys = extract_keys("""
            function Page() {
              const { t } = useTranslation('dashboard');
              return t('title');
            }
            function Other() {
              return t('title');
            }
        """)
        assert set(keys) == {'dashboard:title', 'translation:title'}

    def test_key_prefix(self, extract_keys):
        keys = extract_keys("""
            const { t } = useTranslation('shop', { keyPrefix: 'cart' });
            t('empty');
        """)
        assert keys['shop:cart.empty'].key == 'cart.empty'

    def test_key_prefix_from_constant(self, extract_keys):
        keys = extract_keys("""
            const keyPrefix = 'profile';
            const { t } = useTranslation('account', { keyPrefix });
            t('name');
        """)
        assert 'account:profile.name' in keys

    def test_namespace_array_uses_first(self, extract_keys):
        keys = extract_keys("""
            const [t] = useTranslation(['first', 'second']);
            t('item');
        """)
        assert 'first:item' in keys

    def test_explicit_namespace_beats_scope(self, extract_keys):
        keys = extract_keys("""
            const { t } = useTranslation('scoped');
            t('other:key');
            t('plain', { ns: 'option' });
        """)
        assert set(keys) == {'other:key', 'option:plain'}

    def test_language_first_signature(self, extract_keys):
        keys = extract_keys("""
            const { t } = useTranslation('de', 'legal', { keyPrefix: 'terms' });
            t('intro');
        """)
        assert 'legal:terms.intro' in keys

    def test_fixed_t(self, extract_keys):
        keys = extract_keys("""
            const tt = i18n.getFixedT('en', 'admin', 'users');
            tt('list');
        """)
        assert 'admin:users.list' in keys

    def test_alias_of_member_function(self, extract_keys):
        keys = extract_keys("""
            const translate = i18n.t;
            translate('aliased.key');
        """)
        assert 'translation:aliased.key' in keys

    def test_alias_inherits_binding(self, extract_keys):
        keys = extract_keys("""
            const { t } = useTranslation('billing');
            const tr = t;
            tr('invoice');
        """)
        assert 'billing:invoice' in keys

    def test_shadowed_binding(self, extract_keys):
        keys = extract_keys("""
            const { t } = useTranslation('outer');
            function helper() {
              const t = (value) => value;
              return t('local');
            }
        """)
        assert 'translation:local' in keys
        assert 'outer:local' not in keys

    def test_custom_hook_descriptor(self, make_settings, extract_keys):
        settings = make_settings(use_translation_names=[
            UseTranslationHook(name='useScopedT', ns_arg=1, key_prefix_arg=-1)
        ])
        keys = extract_keys("""
            const t = useScopedT(locale, 'reports');
            t('summary');
        """, settings=settings)
        assert 'reports:summary' in keys

    def test_awaited_hook(self, extract_keys):
        keys = extract_keys("""
            async function loadPage() {
              const { t } = await getT('orders');
              return t('title');
            }
        """)
        assert 'orders:title' in keys

    def test_key_prefix_with_empty_segment(self, extract_keys, caplog):
        with caplog.at_level(logging.WARNING):
            keys = extract_keys("""
                const { t } = useTranslation('ns', { keyPrefix: 'page' });
                t('.broken');
                t('fine');
            """)
        assert set(keys) == {'ns:page.fine'}
        assert "empty segments" in caplog.text


class TestExpressions:
    def test_template_with_constant(self, extract_keys):
        keys = extract_keys("""
            const section = 'billing';
            t(`${section}.title`);
        """)
        assert 'translation:billing.title' in keys

    def test_ternary_keys(self, extract_keys):
        keys = extract_keys("t(isError ? 'status.error' : 'status.ok')")
        assert {'translation:status.error', 'translation:status.ok'} <= set(keys)

    def test_template_cartesian_product(self, extract_keys):
        keys = extract_keys("""
            const size = big ? 'large' : 'small';
            const tone = dark ? 'dark' : 'light';
            t(`button.${size}.${tone}`);
        """)
        assert {
            'translation:button.large.dark', 'translation:button.large.light',
            'translation:button.small.dark', 'translation:button.small.light'
        } == set(keys)

    def test_member_access_on_constant_object(self, extract_keys):
        keys = extract_keys("""
            const KEYS = { save: 'actions.save', cancel: 'actions.cancel' } as const;
            t(KEYS.save);
            t(KEYS['cancel']);
        """, file_path='src/keys.ts')
        assert {'translation:actions.save', 'translation:actions.cancel'} == set(keys)

    def test_concatenation(self, extract_keys):
        keys = extract_keys("""
            const base = 'menu.';
            t(base + 'open');
        """)
        assert 'translation:menu.open' in keys

    def test_type_union_cast(self, extract_keys):
        keys = extract_keys("t(`color.${c as 'red' | 'blue'}`)", file_path='src/colors.ts')
        assert {'translation:color.red', 'translation:color.blue'} == set(keys)

    def test_satisfies_union(self, extract_keys):
        keys = extract_keys("t(`size.${s satisfies 'sm' | 'lg'}`)", file_path='src/sizes.ts')
        assert {'translation:size.sm', 'translation:size.lg'} == set(keys)

    def test_unresolvable_key_is_ignored(self, extract_keys):
        keys = extract_keys("t(someVariable); t(`x.${other}`)")
        assert keys == {}


class TestPluralsAndContext:
    def test_count_marks_plural(self, extract_keys):
        keys = extract_keys("t('item', { count: items.length })")
        key = keys['translation:item#plural']
        assert key.plural is not None
        assert not key.plural.ordinal

    def test_plain_and_plural_are_distinct(self, extract_keys):
        keys = extract_keys("""
            t('item');
            t('item', { count: 2 });
        """)
        assert set(keys) == {'translation:item', 'translation:item#plural'}

    def test_ordinal_option(self, extract_keys):
        keys = extract_keys("t('place', { count: 1, ordinal: true })")
        assert keys['translation:place#ordinal'].plural.ordinal

    def test_ordinal_suffix_wins(self, extract_keys):
        keys = extract_keys("t('place_ordinal', { count: 1, ordinal: false })")
        key = keys['translation:place#ordinal']
        assert key.key == 'place'
        assert key.plural.ordinal

    def test_per_category_defaults(self, extract_keys):
        keys = extract_keys("""
            t('files', { count, defaultValue_one: 'One file', defaultValue_other: '{{count}} files' });
        """)
        plural = keys['translation:files#plural'].plural
        assert plural.forms == {'one': 'One file', 'other': '{{count}} files'}
        assert plural.explicit_variants

    def test_count_placeholder_default_is_not_explicit_for_variants(self, extract_keys):
        keys = extract_keys("t('files', '{{count}} files', { count })")
        key = keys['translation:files#plural']
        assert key.explicit_default
        assert not key.plural.explicit_variants

    def test_disable_plurals(self, make_settings, extract_keys):
        settings = make_settings(disable_plurals=True)
        keys = extract_keys("t('item', { count: 3 })", settings=settings)
        assert set(keys) == {'translation:item'}

    def test_static_context(self, extract_keys):
        keys = extract_keys("t('friend', { context: 'male' })")
        assert set(keys) == {'translation:friend_male'}
        assert keys['translation:friend_male'].context_of is None

    def test_dynamic_context(self, extract_keys):
        keys = extract_keys("t('friend', { context: isMale ? 'male' : 'female' })")
        assert set(keys) == {
            'translation:friend', 'translation:friend_male', 'translation:friend_female'
        }
        assert keys['translation:friend'].context_values == ['male', 'female']
        assert keys['translation:friend_male'].context_of == 'friend'

    def test_context_with_count(self, extract_keys):
        keys = extract_keys("t('friend', { context: 'male', count: n })")
        assert set(keys) == {'translation:friend_male#plural'}

    def test_dynamic_context_with_count_and_no_base_forms(self, make_settings, extract_keys):
        settings = make_settings(generate_base_plural_forms=False)
        keys = extract_keys("t('friend', { context: g === 'm' ? 'male' : 'female', count: n })", settings=settings)
        assert set(keys) == {'translation:friend_male#plural', 'translation:friend_female#plural'}


class TestSpecialForms:
    def test_return_objects_is_opaque(self, extract_keys):
        keys = extract_keys("t('menu', { returnObjects: true })")
        assert keys['translation:menu'].opaque

    def test_selector_function(self, extract_keys):
        keys = extract_keys("t($ => $.user.profile.name)")
        key = keys['translation:user.profile.name']
        assert key.opaque

    def test_nested_translations(self, extract_keys):
        keys = extract_keys("t('summary', 'You have $t(items, { \"count\": 3 }) and $t(common:extra)')")
        assert 'translation:items#plural' in keys
        assert 'common:extra' in keys

    def test_parse_error_raises(self, extract_keys):
        from keysync.utils.validators import ExtractorError
        with pytest.raises(ExtractorError, match="src/App.tsx"):
            extract_keys("t('unclosed'")
