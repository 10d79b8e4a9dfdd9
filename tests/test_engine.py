import os
from pathlib import Path

import pytest

from chartsmith.core.config import Settings
from chartsmith.core.engine import RenderEngine
from chartsmith.core.errors import ChartFetchError, RenderError, TemplaterError
from chartsmith.core.models import TemplateOptions

CRD_FOO = """apiVersion: apiextensions.k8s.io/v1beta1
kind: CustomResourceDefinition
metadata:
  name: foo.chartsmith.example.com
spec:
  group: chartsmith.example.com
  names:
    kind: Foo
"""

CRD_BAR = """apiVersion: apiextensions.k8s.io/v1beta1
kind: CustomResourceDefinition
metadata:
  name: bar.chartsmith.example.com
spec:
  group: chartsmith.example.com
  names:
    kind: Bar
"""

TEMPLATED = """---
# Source: test-chart/templates/service.yaml
apiVersion: v1
kind: Service
metadata:
  name: random-chart-test-chart
spec:
  testValue: foobar
---
---
# Source: test-chart/templates/deployment.yaml
apiVersion: apps/v1
kind: Deployment
metadata:
  name: random-chart-test-chart
spec:
  testValue: foobar
"""


class FakeTemplater:
    def __init__(self, output=TEMPLATED, error=None):
        self.output = output
        self.error = error
        self.calls = []

    def template(self, opts):
        self.calls.append(opts)
        if self.error:
            raise self.error
        return self.output


class FakeFetcher:
    """Writes a chart with one CRD into the scratch directory."""

    def __init__(self, error=None):
        self.error = error
        self.destinations = []

    def pull(self, repo_url, chart, version, into):
        self.destinations.append(into)
        if self.error:
            raise self.error
        crds = Path(into) / chart / "crds"
        crds.mkdir(parents=True)
        (crds / "foo.yaml").write_text(CRD_FOO)


def make_chart(root: Path, crds=None) -> Path:
    chart = root / "test-chart"
    chart.mkdir()
    (chart / "Chart.yaml").write_text("apiVersion: v2\nname: test-chart\nversion: 0.1.0\n")
    for rel_path, content in (crds or {}).items():
        target = chart / "crds" / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
    return chart


def kinds_and_names(manifests):
    return [(m["kind"], m["metadata"]["name"]) for m in manifests]


def test_render_prepends_crds_in_sorted_walk_order(tmp_path):
    chart = make_chart(tmp_path, {
        "z-foo.yaml": CRD_FOO,
        "a-bar.YAML": CRD_BAR,
        "nested/extra.yml": CRD_FOO.replace("foo.", "extra."),
        "README.md": "not yaml: [",
    })
    templater = FakeTemplater()
    engine = RenderEngine(templater=templater, fetcher=FakeFetcher())

    opts = TemplateOptions(chart=str(chart), release="random-chart", set=["testValue=foobar"])
    context = engine.render(opts)

    assert kinds_and_names(context.manifests) == [
        ("CustomResourceDefinition", "bar.chartsmith.example.com"),
        ("CustomResourceDefinition", "foo.chartsmith.example.com"),
        ("CustomResourceDefinition", "extra.chartsmith.example.com"),
        ("Service", "random-chart-test-chart"),
        ("Deployment", "random-chart-test-chart"),
    ]
    assert [Path(p).name for p in context.crd_files] == ["a-bar.YAML", "z-foo.yaml", "extra.yml"]
    assert templater.calls[0].chart == str(chart)
    assert templater.calls[0].set == ["testValue=foobar"]


def test_render_with_auxiliaries_returns_manifests_only(tmp_path):
    chart = make_chart(tmp_path, {"foo.yaml": CRD_FOO})
    engine = RenderEngine(templater=FakeTemplater(), fetcher=FakeFetcher())

    manifests = engine.render_with_auxiliaries(TemplateOptions(chart=str(chart)))

    assert len(manifests) == 3
    assert manifests[0]["kind"] == "CustomResourceDefinition"


def test_render_without_crds_dir(tmp_path):
    chart = make_chart(tmp_path)
    engine = RenderEngine(templater=FakeTemplater(), fetcher=FakeFetcher())

    manifests = engine.render_with_auxiliaries(TemplateOptions(chart=str(chart)))

    assert [m["kind"] for m in manifests] == ["Service", "Deployment"]


def test_render_drops_null_documents(tmp_path):
    chart = make_chart(tmp_path)
    engine = RenderEngine(templater=FakeTemplater("---\n---\n# only a comment\n---\nkind: A\n"),
                          fetcher=FakeFetcher())

    assert engine.render_with_auxiliaries(TemplateOptions(chart=str(chart))) == [{"kind": "A"}]


def test_render_empty_output(tmp_path):
    chart = make_chart(tmp_path)
    engine = RenderEngine(templater=FakeTemplater(""), fetcher=FakeFetcher())

    assert engine.render_with_auxiliaries(TemplateOptions(chart=str(chart))) == []


def test_render_pulls_remote_chart_into_scratch_dir(tmp_path):
    templater = FakeTemplater()
    fetcher = FakeFetcher()
    engine = RenderEngine(templater=templater, fetcher=fetcher)

    opts = TemplateOptions(chart="test-chart", repo="https://charts.example.com", version="0.1.0")
    context = engine.render(opts)

    scratch = fetcher.destinations[0]
    assert templater.calls[0].repo == ""
    assert templater.calls[0].chart == os.path.join(scratch, "test-chart")
    assert templater.calls[0].version == "0.1.0"
    assert context.manifests[0]["metadata"]["name"] == "foo.chartsmith.example.com"
    assert not os.path.exists(scratch)
    # The caller's options are left alone
    assert opts.repo == "https://charts.example.com"


def test_render_fetch_failure_cleans_scratch_dir():
    fetcher = FakeFetcher(error=ChartFetchError("Error: chart not found"))
    engine = RenderEngine(templater=FakeTemplater(), fetcher=fetcher)

    with pytest.raises(RenderError) as excinfo:
        engine.render(TemplateOptions(chart="nope", repo="https://charts.example.com"))

    assert excinfo.value.stage == "fetch"
    assert excinfo.value.chart == "nope"
    assert isinstance(excinfo.value.__cause__, ChartFetchError)
    assert not os.path.exists(fetcher.destinations[0])


def test_render_template_failure(tmp_path):
    chart = make_chart(tmp_path)
    engine = RenderEngine(templater=FakeTemplater(error=TemplaterError("helm exploded")),
                          fetcher=FakeFetcher())

    with pytest.raises(RenderError) as excinfo:
        engine.render(TemplateOptions(chart=str(chart)))

    assert excinfo.value.stage == "template"
    assert excinfo.value.chart == str(chart)
    assert "helm exploded" in str(excinfo.value)


def test_render_malformed_crd_file(tmp_path):
    chart = make_chart(tmp_path, {"broken.yaml": "kind: [CustomResourceDefinition\n"})
    templater = FakeTemplater()
    engine = RenderEngine(templater=templater, fetcher=FakeFetcher())

    with pytest.raises(RenderError) as excinfo:
        engine.render(TemplateOptions(chart=str(chart)))

    assert excinfo.value.stage == "crds"
    assert "broken.yaml" in str(excinfo.value)
    assert templater.calls == []


@pytest.mark.parametrize("output", [
    "kind: A\n---\n- not\n- a\n- map\n",
    "kind: [A\n",
])
def test_render_malformed_template_output(tmp_path, output):
    chart = make_chart(tmp_path)
    engine = RenderEngine(templater=FakeTemplater(output), fetcher=FakeFetcher())

    with pytest.raises(RenderError) as excinfo:
        engine.render(TemplateOptions(chart=str(chart)))

    assert excinfo.value.stage == "decode"


def test_render_namespace_options(tmp_path):
    chart = make_chart(tmp_path, {"foo.yaml": CRD_FOO})
    output = TEMPLATED + "---\napiVersion: v1\nkind: ConfigMap\nmetadata:\n  name: cfg\n  namespace: elsewhere\n"
    engine = RenderEngine(templater=FakeTemplater(output), fetcher=FakeFetcher())

    opts = TemplateOptions(chart=str(chart), namespace="apps")
    manifests = engine.render(opts, include_namespace=True, backfill_namespace=True).manifests

    assert manifests[0] == {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": "apps"}}
    assert [m["metadata"]["namespace"] for m in manifests[1:]] == ["apps", "apps", "apps", "elsewhere"]


def test_custom_crd_settings(tmp_path):
    chart = make_chart(tmp_path)
    extra = chart / "definitions"
    extra.mkdir()
    (extra / "foo.json").write_text('{"kind": "CustomResourceDefinition", "metadata": {"name": "json-crd"}}')
    settings = Settings(crd_dirname="definitions", crd_extensions=(".json",))
    engine = RenderEngine(templater=FakeTemplater(""), fetcher=FakeFetcher(), settings=settings)

    manifests = engine.render_with_auxiliaries(TemplateOptions(chart=str(chart)))

    assert kinds_and_names(manifests) == [("CustomResourceDefinition", "json-crd")]


def test_render_unconstructible_template_output(tmp_path):
    chart = make_chart(tmp_path)
    engine = RenderEngine(templater=FakeTemplater("kind: A\nmetadata:\n  created: 2020-13-45\n"),
                          fetcher=FakeFetcher())

    with pytest.raises(RenderError) as excinfo:
        engine.render(TemplateOptions(chart=str(chart)))

    assert excinfo.value.stage == "decode"
    assert excinfo.value.chart == str(chart)


@pytest.mark.parametrize("content", [
    b"kind: \xff\n",
    b"kind: CustomResourceDefinition\nmetadata:\n  created: 2020-13-45\n",
])
def test_render_undecodable_crd_file(tmp_path, content):
    chart = make_chart(tmp_path)
    crds = chart / "crds"
    crds.mkdir()
    (crds / "x.yaml").write_bytes(content)
    engine = RenderEngine(templater=FakeTemplater(), fetcher=FakeFetcher())

    with pytest.raises(RenderError) as excinfo:
        engine.render(TemplateOptions(chart=str(chart)))

    assert excinfo.value.stage == "crds"
    assert excinfo.value.chart == str(chart)
    assert "x.yaml" in str(excinfo.value)
