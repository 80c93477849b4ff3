from setuptools import setup  # type: ignore

setup(
    name="adapterclip",
    version="1.0.0",
    packages=["adapterclip", "adapterclip.common", "adapterclip.core", "adapterclip.scripts"],
    install_requires=[
        "pysam>=0.22",
        "dnaio>=1.0",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["mark_adapters_run=adapterclip.scripts.mark_adapters_run:main"]},
    include_package_data=True,
    zip_safe=False,
)
