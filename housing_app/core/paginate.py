class PaginatePage:
    def offset(self, page: int, per_page: int) -> int:
        return (max(page, 1) - 1) * per_page

    def page_meta(self, total: int, page: int, per_page: int) -> dict:
        pages = (total + per_page - 1) // per_page if per_page else 0
        return {
            "total": total,
            "page": page,
            "per_page": per_page,
            "pages": pages,
            "has_more": page * per_page < total,
        }

    def envelope(self, items: list, total: int, page: int, per_page: int) -> dict:
        return {
            "success": True,
            "data": items,
            "meta": self.page_meta(total, page, per_page),
        }
