"""分类树工具：所有函数只处理 categories 表行（dict），不访问数据库。"""

from typing import Any, Dict, Iterable, List, Optional, Set


def sort_categories(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(
        rows, key=lambda c: (c.get("order") or 0, (c.get("name") or "").lower())
    )


def build_tree(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """平铺列表 -> 嵌套树，父节点不在列表中的分类作为根节点"""
    nodes = {row["id"]: {**row, "children": []} for row in rows}
    roots: List[Dict[str, Any]] = []
    for node in nodes.values():
        parent = nodes.get(node.get("parent_id"))
        if parent is not None and parent is not node:
            parent["children"].append(node)
        else:
            roots.append(node)

    def _sort(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        items = sort_categories(items)
        for item in items:
            item["children"] = _sort(item["children"])
        return items

    return _sort(roots)


def descendant_ids(rows: Iterable[Dict[str, Any]], root_id: str) -> List[str]:
    """root 及其所有子孙分类 id（广度优先）"""
    children: Dict[Optional[str], List[str]] = {}
    for row in rows:
        children.setdefault(row.get("parent_id"), []).append(row["id"])

    result = [root_id]
    seen: Set[str] = {root_id}
    queue = [root_id]
    while queue:
        current = queue.pop(0)
        for child in children.get(current, []):
            if child not in seen:
                seen.add(child)
                result.append(child)
                queue.append(child)
    return result


def would_create_cycle(
    rows: Iterable[Dict[str, Any]], category_id: str, new_parent_id: Optional[str]
) -> bool:
    """把 category_id 挂到 new_parent_id 下是否会成环"""
    if not new_parent_id:
        return False
    if new_parent_id == category_id:
        return True
    parents = {row["id"]: row.get("parent_id") for row in rows}
    current: Optional[str] = new_parent_id
    visited: Set[str] = set()
    while current and current not in visited:
        if current == category_id:
            return True
        visited.add(current)
        current = parents.get(current)
    return False


def unknown_ids(rows: Iterable[Dict[str, Any]], ids: Iterable[str]) -> List[str]:
    known = {row["id"] for row in rows}
    return [i for i in ids if i not in known]
