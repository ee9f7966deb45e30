import types
import unittest

import kernelbench.reference as ref
from kernelbench.errors import InvalidArgumentError
from kernelbench.providers import (
    KERNEL_METHODS,
    KernelProvider,
    ModuleProvider,
    get_provider,
    list_providers,
    missing_capabilities,
    provider_name,
    register_provider,
    resolve_provider,
    unregister_provider,
)


class TestRegistry(unittest.TestCase):
    def test_bundled_providers(self):
        assert list_providers() == ["reference", "vectorized"]

    def test_get_provider(self):
        for name in list_providers():
            provider = get_provider(name)
            assert provider.name == name
            assert isinstance(provider, KernelProvider)
            assert provider.count_primes(100) == 25

    def test_unknown_provider_fails(self):
        with self.assertRaisesRegex(InvalidArgumentError, "reference"):
            get_provider("gpu")

    def test_register_and_unregister(self):
        register_provider("copy", lambda: ModuleProvider(name="copy", module=ref))
        try:
            assert "copy" in list_providers()
            assert get_provider("copy").count_primes(10) == 4
            with self.assertRaises(InvalidArgumentError):
                register_provider("copy", lambda: ModuleProvider(name="copy", module=ref))
            register_provider("copy", lambda: ModuleProvider(name="copy2", module=ref), overwrite=True)
            assert get_provider("copy").name == "copy2"
        finally:
            unregister_provider("copy")
        assert "copy" not in list_providers()

    def test_unregister_unknown_fails(self):
        with self.assertRaises(InvalidArgumentError):
            unregister_provider("nope")

    def test_factory_returning_incomplete_provider_fails(self):
        register_provider("broken", lambda: object())
        try:
            with self.assertRaises(InvalidArgumentError):
                get_provider("broken")
        finally:
            unregister_provider("broken")


class TestModuleProvider(unittest.TestCase):
    def test_from_module_uses_module_name_constant(self):
        provider = ModuleProvider.from_module("kernelbench.vectorized")
        assert provider.name == "vectorized"

    def test_incomplete_module_fails(self):
        module = types.ModuleType("partial")
        module.count_primes = ref.count_primes
        with self.assertRaisesRegex(InvalidArgumentError, "render_fractal"):
            ModuleProvider(name="partial", module=module)

    def test_delegates_every_kernel(self):
        provider = get_provider("reference")
        assert list(provider.enumerate_primes(10)) == [2, 3, 5, 7]
        assert list(provider.multiply_naive([2.0], [3.0], 1)) == [6.0]
        assert list(provider.multiply_optimized([2.0], [3.0], 1)) == [6.0]
        image = provider.generate_test_image(2, 2)
        assert len(provider.box_blur(image, 2, 2, 1)) == 16
        assert len(provider.render_fractal(2, 2, 0.0, 0.0, 1.0, 4)) == 16


class TestResolveProvider(unittest.TestCase):
    def test_by_name(self):
        assert resolve_provider("reference").name == "reference"

    def test_object_passes_through(self):
        provider = get_provider("vectorized")
        assert resolve_provider(provider) is provider

    def test_incomplete_object_fails(self):
        with self.assertRaises(InvalidArgumentError):
            resolve_provider(object())

    def test_missing_capabilities(self):
        assert missing_capabilities(object()) == list(KERNEL_METHODS)
        assert missing_capabilities(ref) == []

    def test_provider_name(self):
        assert provider_name(get_provider("reference")) == "reference"
        assert provider_name(object()) == "object"
