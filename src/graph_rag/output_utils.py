from pathlib import Path
from typing import List, Union

from graph_rag.analytics import compute_structural_profile
from graph_rag.graph import DocumentGraph
from pdf_reader.models import ElementType

def save_graph(graph: DocumentGraph, output_path: Union[str, Path], output_format: str = "graph") -> None:
    """Save the graph to a JSON file.

    Args:
        graph: Document graph to save
        output_path: Path to output JSON file
        output_format: "graph" (nested) or "sequential" (flat with breadcrumbs)
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(graph.to_json(output_format))

def print_document_summary(graph: DocumentGraph) -> None:
    """Print a summary of the assembled document.

    Args:
        graph: Document graph to summarize
    """
    profile = compute_structural_profile(graph)
    info = graph.document_info
    print(f"\n📄 Document: '{info.title}' ({info.page_count} pages)")
    print(f"📊 Total nodes: {profile['total_nodes']} (max depth {profile['depth']['max']})")

    print("📋 Node breakdown:")
    for name, stats in profile['node_types'].items():
        print(f"   {name}: {stats['count']} ({stats['share']:.0%})")

    health = profile['structural_health']
    print(f"🩺 Health: token variance {health['token_variance']}, depth {health['depth_balance']}, "
          f"node types {health['node_type_richness']}")

def print_section_preview(graph: DocumentGraph, max_sections: int = 5) -> None:
    """Print a preview of the first few sections.

    Args:
        graph: Document graph
        max_sections: Maximum number of sections to preview
    """
    sections = [(node, ancestors) for node, ancestors in graph.root.walk() if node.type == ElementType.SECTION]
    print(f"\n🔍 First {min(max_sections, len(sections))} sections:")

    for node, ancestors in sections[:max_sections]:
        indent = "  " * (len(ancestors) - 1)
        print(f"{indent}📑 {node.id} - '{node.text[:80]}'")
        if node.page_span:
            print(f"{indent}   Pages: {node.page_span[0]}-{node.page_span[1]} | Children: {len(node.children)}")
        print()

def find_structure_issues(graph: DocumentGraph) -> List[str]:
    """Return structural problems in the tree (level nesting, box containment, sibling order)."""
    issues = []
    if graph.root.level != 0:
        issues.append(f"root has level {graph.root.level}")

    for node, _ in graph.root.walk():
        previous_key = None
        for child in node.children:
            if child.level <= node.level:
                issues.append(f"node {child.id} (level {child.level}) is not deeper than parent {node.id}")
            if node.bbox and child.bbox and not node.bbox.contains(child.bbox):
                issues.append(f"node {node.id} does not contain child {child.id}")
            if child.page_span and child.bbox:
                key = (child.page_span[0], child.bbox.top, child.bbox.left)
                if previous_key and key[0] < previous_key[0]:
                    issues.append(f"node {child.id} starts on an earlier page than its previous sibling")
                previous_key = key
    return issues

def validate_document_structure(graph: DocumentGraph) -> bool:
    """Validate the document structure for consistency.

    Args:
        graph: Document graph to validate

    Returns:
        True if structure is valid
    """
    issues = find_structure_issues(graph)
    if issues:
        print("⚠️  Structure validation issues found:")
        for issue in issues:
            print(f"   - {issue}")
        return False

    print("✅ Document structure validation passed")
    return True
