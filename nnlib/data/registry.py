"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, MutableMapping

from ..core.types import AnnotatedData


@dataclass(frozen=True)
class DataSpec:
    """Structural information about a dataset.

    Attributes
    ----------
    d_in:
        Length of every input vector.
    d_out:
        Length of every one-hot target vector.
    num_classes:
        Number of discrete classes encoded by the targets.
    extra:
        Free-form metadata, for example the ``image_shape`` of flattened
        image inputs, used by reporting helpers.
    """

    d_in: int
    d_out: int
    num_classes: int
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DatasetSpec:
    """A registered dataset materialised into training and test examples."""

    name: str
    training: AnnotatedData
    test: AnnotatedData
    data_spec: DataSpec
    provenance: Dict[str, Any]

    @property
    def splits(self) -> Dict[str, int]:
        return {"train": len(self.training), "test": len(self.test)}


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("mnist")
        def make_mnist(**kwargs):
            ...

    or directly::

        register_dataset("sign", make_sign)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Build the :class:`DatasetSpec` registered as ``dataset``."""

    if dataset not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")
    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    data_spec = spec.data_spec
    if data_spec.d_out != data_spec.num_classes:
        raise ValueError(
            f"Dataset {spec.name!r} has {data_spec.num_classes} classes "
            f"but targets of length {data_spec.d_out}"
        )
    for split, examples in (("train", spec.training), ("test", spec.test)):
        for example in examples:
            if example.inputs.length != data_spec.d_in or example.target.length != data_spec.d_out:
                raise ValueError(
                    f"Split {split!r} of dataset {spec.name!r} contains an example of shape "
                    f"({example.inputs.length}, {example.target.length}); "
                    f"expected ({data_spec.d_in}, {data_spec.d_out})"
                )


__all__ = [
    "DataSpec",
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
