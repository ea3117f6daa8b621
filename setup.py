import os
import sys

from setuptools import find_packages, setup

VERSION = "1.0.0"
# Try to import mypyc, make it optional
try:
	from mypyc.build import mypycify

	MYPYC_AVAILABLE = True
except ImportError:
	MYPYC_AVAILABLE = False


def readme():
	with open("README.md", "r", encoding="utf-8") as fh:
		return fh.read()


def list_ext_modules(base_path="src/py/buffered"):
	python_files = []
	for root, _, files in os.walk(base_path):
		for file in files:
			# The entry point is not compiled
			if file.endswith(".py") and file != "__main__.py":
				python_files.append(os.path.join(root, file))
	return python_files


USE_MYPYC = MYPYC_AVAILABLE and "--use-mypyc" in sys.argv and "sdist" not in sys.argv

if "--use-mypyc" in sys.argv:
	sys.argv.remove("--use-mypyc")

ext_modules = []
if USE_MYPYC:
	ext_modules = mypycify(list_ext_modules())


setup(
	name="buffered-response",
	version=VERSION,
	author="Sébastien Pierre",
	author_email="sebastien.pierre@gmail.com",
	description="A deferred HTTP response buffer that commits headers, cookies and a rendered view in a fixed order",
	long_description=readme(),
	long_description_content_type="text/markdown",
	packages=find_packages(where="src/py"),
	package_dir={"": "src/py"},
	classifiers=[
		"Development Status :: 4 - Beta",
		"Intended Audience :: Developers",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Programming Language :: Python :: 3",
		"Programming Language :: Python :: 3.10",
		"Programming Language :: Python :: 3.11",
		"Programming Language :: Python :: 3.12",
		"Topic :: Internet :: WWW/HTTP",
		"Topic :: Software Development :: Libraries :: Python Modules",
	],
	python_requires=">=3.10",
	install_requires=[
		"mypy-extensions",
	],
	extras_require={
		"dev": [
			"mypy",
			"flake8",
			"bandit",
			"pytest",
		],
	},
	entry_points={
		"console_scripts": [
			"buffered=buffered.__main__:run",
		],
	},
	include_package_data=True,
	zip_safe=False,
	# NOTE: mypyc compilation is optional and experimental
	ext_modules=ext_modules,
)
