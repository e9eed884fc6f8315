"""Supplier composition of orders."""

from services.order_service.composition import (
    OrderComposition,
    resolve_composition,
    resolve_compositions,
)


class TestOrderComposition:
    def test_single_supplier_can_be_managed_by_that_supplier(self):
        composition = OrderComposition(order_id=1, supplier_ids=frozenset({3}))
        assert composition.is_single_supplier
        assert composition.can_be_managed_by(3)
        assert not composition.can_be_managed_by(4)
        assert not composition.contains_other_suppliers(3)

    def test_multi_supplier_cannot_be_managed_by_anyone(self):
        composition = OrderComposition(order_id=1, supplier_ids=frozenset({3, 4}))
        assert not composition.is_single_supplier
        assert composition.involves(3)
        assert not composition.can_be_managed_by(3)
        assert composition.contains_other_suppliers(3)

    def test_unrelated_supplier_sees_others(self):
        composition = OrderComposition(order_id=1, supplier_ids=frozenset({3}))
        assert not composition.involves(9)
        assert composition.contains_other_suppliers(9)


class TestResolveCompositions:
    async def test_resolves_many_orders_in_one_call(self, db, marketplace):
        buyer = await marketplace.buyer()
        north = await marketplace.supplier("North Farm")
        south = await marketplace.supplier("South Dairy")
        tomatoes = await marketplace.product(north)
        cheese = await marketplace.product(south, name="Cheddar")
        single = await marketplace.order(buyer, [(tomatoes, 2, "9.00")])
        mixed = await marketplace.order(buyer, [(tomatoes, 1, "4.50"), (cheese, 1, "6.00")])
        empty = await marketplace.order(buyer, [], total_amount=0)

        compositions = await resolve_compositions(db, [single.id, mixed.id, empty.id])

        assert compositions[single.id].supplier_ids == frozenset({north.id})
        assert compositions[mixed.id].supplier_ids == frozenset({north.id, south.id})
        assert empty.id not in compositions

    async def test_products_without_supplier_are_ignored(self, db, marketplace):
        buyer = await marketplace.buyer()
        north = await marketplace.supplier()
        owned = await marketplace.product(north)
        orphan = await marketplace.product(None, name="Gift wrap")
        order = await marketplace.order(buyer, [(owned, 1, "4.50"), (orphan, 1, "1.00")])

        composition = await resolve_composition(db, order.id)

        assert composition.supplier_ids == frozenset({north.id})
        assert composition.can_be_managed_by(north.id)

    async def test_no_orders_no_query(self, db):
        assert await resolve_compositions(db, []) == {}
