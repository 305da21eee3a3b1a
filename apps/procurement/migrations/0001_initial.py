from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='WholesalerOrder',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('wholesaler_name', models.CharField(max_length=200)),
                ('order_date', models.DateTimeField()),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('PartiallyReceived', 'Partially received'), ('Completed', 'Completed'), ('Cancelled', 'Cancelled')], default='Pending', max_length=24)),
                ('received_date', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-order_date'],
            },
        ),
        migrations.CreateModel(
            name='OrderItem',
            fields=[
                ('id', models.CharField(max_length=64, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('category', models.CharField(max_length=64)),
                ('quantity', models.CharField(max_length=64)),
                ('units_per_pack', models.PositiveIntegerField(blank=True, null=True)),
                ('unit_name', models.CharField(blank=True, max_length=32)),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('Received', 'Received')], default='Pending', max_length=16)),
                ('position', models.PositiveIntegerField(default=0)),
                ('order', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='procurement.wholesalerorder')),
            ],
            options={
                'ordering': ['position'],
            },
        ),
    ]
