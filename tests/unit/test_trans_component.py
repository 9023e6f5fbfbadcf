"""
Tests for rich-text component extraction
"""


class TestTransComponent:
    def test_key_and_children_default(self, extract_keys):
        keys = extract_keys("""
            const App = () => <Trans i18nKey="welcome">Hello <strong>world</strong></Trans>;
        """)
        key = keys['translation:welcome']
        assert key.default_value == 'Hello <strong>world</strong>'
        assert not key.explicit_default

    def test_indexed_elements(self, extract_keys):
        keys = extract_keys("""
            const App = () => (
              <Trans i18nKey="app.description">
                This is a <a href="/docs">description</a>.
              </Trans>
            );
        """)
        assert keys['translation:app.description'].default_value == 'This is a <1>description</1>.'

    def test_children_as_key(self, extract_keys):
        keys = extract_keys("const A = () => <Trans>Read the <Link to=\"/faq\">FAQ</Link></Trans>;")
        assert 'translation:Read the <1>FAQ</1>' in keys

    def test_interpolation_and_self_closing(self, extract_keys):
        keys = extract_keys("""
            const A = () => <Trans i18nKey="greeting">Hi {{name}},<br/>welcome back</Trans>;
        """)
        assert keys['translation:greeting'].default_value == 'Hi {{name}},<br/>welcome back'

    def test_multiline_text_collapses(self, extract_keys):
        keys = extract_keys("""
            const A = () => (
              <Trans i18nKey="multi">
                First line
                second line
              </Trans>
            );
        """)
        assert keys['translation:multi'].default_value == 'First line second line'

    def test_entities_are_decoded(self, extract_keys):
        keys = extract_keys('const A = () => <Trans i18nKey="terms">Terms &amp; conditions</Trans>;')
        assert keys['translation:terms'].default_value == 'Terms & conditions'

    def test_defaults_attribute_is_explicit(self, extract_keys):
        keys = extract_keys('const A = () => <Trans i18nKey="note" defaults="Default <0>text</0>" />;')
        key = keys['translation:note']
        assert key.default_value == 'Default <0>text</0>'
        assert key.explicit_default

    def test_ns_attribute(self, extract_keys):
        keys = extract_keys('const A = () => <Trans ns="common" i18nKey="common:save">Save</Trans>;')
        key = keys['common:save']
        assert key.key == 'save'

    def test_t_prop_supplies_namespace_and_prefix(self, extract_keys):
        keys = extract_keys("""
            function Cart() {
              const { t } = useTranslation('shop', { keyPrefix: 'cart' });
              return <Trans t={t} i18nKey="empty">Your cart is empty</Trans>;
            }
        """)
        assert 'shop:cart.empty' in keys

    def test_count_makes_plural(self, extract_keys):
        keys = extract_keys("""
            const A = () => <Trans i18nKey="inbox" count={messages.length}>You have {{count}} messages</Trans>;
        """)
        key = keys['translation:inbox#plural']
        assert key.plural.default == 'You have {{count}} messages'

    def test_values_count_makes_plural(self, extract_keys):
        keys = extract_keys("""
            const A = () => <Trans i18nKey="inbox" values={{ count }}>Messages</Trans>;
        """)
        assert 'translation:inbox#plural' in keys

    def test_context_attribute(self, extract_keys):
        keys = extract_keys('const A = () => <Trans i18nKey="invite" context="female">She invited you</Trans>;')
        assert set(keys) == {'translation:invite_female'}

    def test_empty_key_attribute_is_skipped(self, extract_keys):
        keys = extract_keys("""
            const A = () => (
              <div>
                <Trans i18nKey="">Nothing</Trans>
                <Trans i18nKey="kept">Kept</Trans>
              </div>
            );
        """)
        assert set(keys) == {'translation:kept'}

    def test_custom_component_name(self, make_settings, extract_keys):
        settings = make_settings(trans_components=['RichText'])
        keys = extract_keys('const A = () => <RichText i18nKey="rich">Bold <b>move</b></RichText>;', settings=settings)
        assert keys['translation:rich'].default_value == 'Bold <1>move</1>'
